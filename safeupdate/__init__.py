from .compiler import (
    Action,
    BatchResult,
    MutationRequest,
    OperationDescriptor,
    RecordKey,
    compile_batch,
    compile_updates,
)
from .config import DEFAULT_UPDATE_POLICY, ActionRule, PolicyConfig
from .errors import ConfigurationError, SafeUpdateError, ValidationError

__all__ = [
    "compile_updates",
    "compile_batch",
    "Action",
    "ActionRule",
    "PolicyConfig",
    "DEFAULT_UPDATE_POLICY",
    "MutationRequest",
    "RecordKey",
    "OperationDescriptor",
    "BatchResult",
    "SafeUpdateError",
    "ConfigurationError",
    "ValidationError",
]
