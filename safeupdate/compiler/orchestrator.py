from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from ..config import LAST_UPDATED_FIELD, VERSION_FIELD, PolicyConfig
from ..errors import ConfigurationError, ValidationError
from .classifier import classify
from .expression import compile_expression
from .metrics import observe_batch, observe_request_compiled, observe_request_rejected
from .models import MutationRequest, OperationDescriptor
from .validator import validate
from .values import Value

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
RequestLike = Union[MutationRequest, Mapping[str, Any]]
PolicyLike = Union[PolicyConfig, Mapping[str, Any]]


@dataclass
class RequestFailure:
    index: int
    error: ValidationError


@dataclass
class BatchResult:
    """Descriptors for the requests that compiled, in input order, plus the rejects."""

    operations: list[OperationDescriptor] = field(default_factory=list)
    failures: list[RequestFailure] = field(default_factory=list)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _without_field(request: MutationRequest, name: str) -> MutationRequest:
    return replace(
        request,
        assign={k: v for k, v in request.assign.items() if k != name},
        remove=tuple(f for f in request.remove if f != name),
        increment={k: v for k, v in request.increment.items() if k != name},
        append={k: v for k, v in request.append.items() if k != name},
    )


def apply_auto_fields(
    request: MutationRequest,
    policy: PolicyConfig,
    timestamp: str,
) -> MutationRequest:
    """
    Inject the policy's bookkeeping fields into a request.

    Any caller-supplied ``lastUpdated`` / ``version`` entry is dropped from every
    bucket first, so the injected entry is the only one. Returns a new request;
    applying it twice gives the same result.
    """
    if policy.auto_timestamp:
        request = _without_field(request, LAST_UPDATED_FIELD)
        request = replace(
            request,
            assign={**request.assign, LAST_UPDATED_FIELD: Value.of(timestamp)},
        )
    if policy.auto_version:
        request = _without_field(request, VERSION_FIELD)
        request = replace(
            request,
            increment={**request.increment, VERSION_FIELD: Value.of(1)},
        )
    return request


def compile_request(table: str, request: MutationRequest, policy: PolicyConfig) -> OperationDescriptor:
    """Classify, validate and compile a single (already auto-filled) request."""
    fields = classify(request)
    validate(fields, request, policy)
    compiled = compile_expression(fields, request)
    return OperationDescriptor(
        table=table,
        key=request.key.to_wire(),
        update_expression=compiled.expression,
        names=compiled.names,
        values=compiled.values,
    )


def compile_batch(
    table: str,
    requests: Sequence[RequestLike],
    policy: PolicyLike,
    *,
    clock: Optional[Clock] = None,
) -> BatchResult:
    """
    Compile a batch of mutation requests into update descriptors.

    The policy is required; pass ``DEFAULT_UPDATE_POLICY`` for the stock
    behaviour. With ``fail_on_error`` the first rejected request aborts the
    call. Otherwise rejects are logged, recorded in ``BatchResult.failures`` and
    left out of ``BatchResult.operations``.

    Neither the policy nor the requests are modified.

    Raises:
        ConfigurationError: The policy (or table name) is invalid. Raised before
            any request is looked at, whatever ``fail_on_error`` says.
        ValidationError: First rejected request, when ``fail_on_error`` is set
    """
    policy = PolicyConfig.coerce(policy)
    if not isinstance(table, str) or not table:
        raise ConfigurationError(
            "Malformed configuration",
            f"Table name must be a non-empty string, got {table!r}",
        )

    effective = policy.effective()
    timestamp = format_timestamp((clock or _utc_now)())
    result = BatchResult()
    start_time = time.monotonic()

    # Auto fields go into every request before any request is validated
    prepared: list[Union[MutationRequest, ValidationError]] = []
    for raw in requests:
        try:
            prepared.append(apply_auto_fields(MutationRequest.coerce(raw), effective, timestamp))
        except ValidationError as exc:
            prepared.append(exc)

    logger.debug("Compiling %d update requests for table %s", len(prepared), table)

    try:
        for index, item in enumerate(prepared):
            try:
                if isinstance(item, ValidationError):
                    raise item
                operation = compile_request(table, item, effective)
            except ValidationError as exc:
                observe_request_rejected(table, exc.kind.value)
                if policy.fail_on_error:
                    raise
                logger.error(
                    "Skipping update request %d for table %s: %s (%s)",
                    index,
                    table,
                    exc.message,
                    exc.detail,
                )
                result.failures.append(RequestFailure(index=index, error=exc))
                continue

            observe_request_compiled(table)
            result.operations.append(operation)
    finally:
        observe_batch(table, time.monotonic() - start_time)

    logger.info(
        "Compiled %d of %d update requests for table %s",
        len(result.operations),
        len(prepared),
        table,
    )
    return result


def compile_updates(
    table: str,
    requests: Sequence[RequestLike],
    policy: PolicyLike,
    *,
    clock: Optional[Clock] = None,
) -> list[OperationDescriptor]:
    """Like ``compile_batch`` but returns only the compiled descriptors."""
    return compile_batch(table, requests, policy, clock=clock).operations
