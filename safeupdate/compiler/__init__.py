from .classifier import classify
from .expression import UpdateExpression, compile_expression
from .models import (
    Action,
    ClassifiedFields,
    MutationRequest,
    OperationDescriptor,
    RecordKey,
    chunked,
)
from .orchestrator import (
    BatchResult,
    RequestFailure,
    apply_auto_fields,
    compile_batch,
    compile_request,
    compile_updates,
)
from .validator import validate
from .values import Value, ValueKind

__all__ = [
    "Action",
    "RecordKey",
    "MutationRequest",
    "ClassifiedFields",
    "OperationDescriptor",
    "UpdateExpression",
    "Value",
    "ValueKind",
    "BatchResult",
    "RequestFailure",
    "classify",
    "validate",
    "compile_expression",
    "compile_request",
    "apply_auto_fields",
    "compile_batch",
    "compile_updates",
    "chunked",
]
