from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence

from ..errors import MalformedKeyError, MalformedRequestError
from .values import Value, to_wire

KEY_FORMAT = "Item key must be of the form: {pk: <partition-key>, sk: <sort-key>}"
EXISTS_CONDITION = "attribute_exists(pk)"


class Action(str, Enum):
    ASSIGN = "assign"
    REMOVE = "remove"
    INCREMENT = "increment"
    APPEND = "append"

    @classmethod
    def parse(cls, name: "str | Action") -> "Action":
        if isinstance(name, Action):
            return name
        try:
            return cls(_ACTION_ALIASES.get(name, name))
        except ValueError:
            raise ValueError(
                f"Unknown action {name!r}; expected one of: {[a.value for a in cls]}"
            ) from None


_ACTION_ALIASES = {"set": "assign", "add": "increment"}

# Fixed evaluation order for validation and compilation
ACTION_ORDER = (Action.ASSIGN, Action.REMOVE, Action.INCREMENT, Action.APPEND)


def _is_valid_key_part(part: Any) -> bool:
    if isinstance(part, str):
        return part != ""
    return isinstance(part, (int, Decimal)) and not isinstance(part, bool)


@dataclass(frozen=True)
class RecordKey:
    """Structural key of a record: partition id plus sort id."""

    pk: Any
    sk: Any

    def __post_init__(self) -> None:
        if not (_is_valid_key_part(self.pk) and _is_valid_key_part(self.sk)):
            raise MalformedKeyError(
                f"Malformed item key: {{pk: {self.pk!r}, sk: {self.sk!r}}}",
                KEY_FORMAT,
            )

    @classmethod
    def from_mapping(cls, raw: Any) -> "RecordKey":
        if not isinstance(raw, Mapping):
            raise MalformedKeyError(f"Malformed item key: {raw!r}", KEY_FORMAT)
        return cls(pk=raw.get("pk"), sk=raw.get("sk"))

    def to_wire(self) -> dict[str, Any]:
        return {"pk": to_wire(self.pk), "sk": to_wire(self.sk)}


@dataclass(frozen=True)
class MutationRequest:
    """
    One record to update.

    Plain payloads are classified on construction, so
    ``MutationRequest(key, assign={"status": "done"})`` holds ``Value``s like a
    parsed request does. Buckets are treated as read-only; helpers that change
    a request (auto-field injection) return a new instance.
    """

    key: RecordKey
    assign: Mapping[str, Value] = field(default_factory=dict)
    remove: tuple[str, ...] = ()
    increment: Mapping[str, Value] = field(default_factory=dict)
    append: Mapping[str, Value] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.key, RecordKey):
            raise MalformedKeyError(f"Malformed item key: {self.key!r}", KEY_FORMAT)
        object.__setattr__(self, "remove", _parse_remove(self.remove))
        for action in (Action.ASSIGN, Action.INCREMENT, Action.APPEND):
            object.__setattr__(self, action.value, _parse_bucket(getattr(self, action.value), action))

    @classmethod
    def from_mapping(cls, raw: Any) -> "MutationRequest":
        """
        Parse a JSON-like request.

        Accepts ``assign``/``remove``/``increment``/``append`` buckets, and the
        ``set``/``add`` aliases. The key is checked before any bucket.

        Raises:
            MalformedKeyError: Key missing, or either part empty
            MalformedRequestError: A bucket has the wrong shape
            UnsupportedValueError: A value cannot be stored
        """
        if not isinstance(raw, Mapping):
            raise MalformedKeyError(f"Malformed item: {raw!r}", KEY_FORMAT)
        key = RecordKey.from_mapping(raw.get("key"))

        buckets: dict[Action, Any] = {}
        for name, payload in raw.items():
            if name == "key":
                continue
            try:
                action = Action.parse(name)
            except ValueError:
                raise MalformedRequestError(
                    f"Malformed request: Unknown action '{name}'",
                    f"Action '{name}' is not one of: {[a.value for a in Action]}",
                ) from None
            if action in buckets:
                raise MalformedRequestError(
                    f"Malformed request: Action '{action.value}' given more than once",
                    f"Use either '{action.value}' or its alias, not both",
                )
            if payload is not None:
                buckets[action] = payload

        return cls(
            key=key,
            assign=buckets.get(Action.ASSIGN),
            remove=buckets.get(Action.REMOVE),
            increment=buckets.get(Action.INCREMENT),
            append=buckets.get(Action.APPEND),
        )

    @classmethod
    def coerce(cls, obj: "MutationRequest | Mapping[str, Any]") -> "MutationRequest":
        if isinstance(obj, MutationRequest):
            return obj
        return cls.from_mapping(obj)

    def bucket(self, action: Action) -> Mapping[str, Value]:
        if action is Action.ASSIGN:
            return self.assign
        if action is Action.INCREMENT:
            return self.increment
        if action is Action.APPEND:
            return self.append
        raise ValueError(f"Action {action.value!r} has no value bucket")


def _check_field_name(name: Any, action: Action) -> None:
    if not isinstance(name, str) or not name:
        raise MalformedRequestError(
            f"Malformed request: Invalid field name in '{action.value}' action list",
            f"Field names must be non-empty strings, got {name!r}",
        )


def _parse_remove(payload: Any) -> tuple[str, ...]:
    if payload is None:
        return ()
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise MalformedRequestError(
            "Malformed request: Invalid 'remove' action list",
            "'remove' must be a list of field names",
        )
    for name in payload:
        _check_field_name(name, Action.REMOVE)
    return tuple(payload)


def _parse_bucket(payload: Any, action: Action) -> dict[str, Value]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise MalformedRequestError(
            f"Malformed request: Invalid '{action.value}' action list",
            f"'{action.value}' must be a mapping of field -> value",
        )
    bucket: dict[str, Value] = {}
    for name, raw in payload.items():
        _check_field_name(name, action)
        bucket[name] = Value.of(raw)
    return bucket


@dataclass(frozen=True)
class ClassifiedFields:
    """Field names of one request, split by action."""

    assign: tuple[str, ...] = ()
    remove: tuple[str, ...] = ()
    increment: tuple[str, ...] = ()
    append: tuple[str, ...] = ()

    def for_action(self, action: Action) -> tuple[str, ...]:
        return getattr(self, action.value)

    def all_fields(self) -> list[str]:
        """Every field name in action order, duplicates kept."""
        fields: list[str] = []
        for action in ACTION_ORDER:
            fields.extend(self.for_action(action))
        return fields

    def is_empty(self) -> bool:
        return not self.all_fields()


@dataclass(frozen=True)
class OperationDescriptor:
    """
    A compiled conditional partial update for a single record.

    The descriptor is store-ready but never submitted here; see
    ``to_request()`` and ``to_transact_item()``.
    """

    table: str
    key: Mapping[str, Any]
    update_expression: str
    names: Mapping[str, str]
    values: Mapping[str, Any]
    condition_expression: str = EXISTS_CONDITION

    def __post_init__(self) -> None:
        # read-only views so a returned descriptor cannot be edited in place
        object.__setattr__(self, "key", MappingProxyType(dict(self.key)))
        object.__setattr__(self, "names", MappingProxyType(dict(self.names)))
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def to_request(self) -> dict[str, Any]:
        """Keyword arguments for a DynamoDB client ``update_item`` call."""
        request: dict[str, Any] = {
            "TableName": self.table,
            "Key": dict(self.key),
            "UpdateExpression": self.update_expression,
            "ExpressionAttributeNames": dict(self.names),
            "ConditionExpression": self.condition_expression,
        }
        # DynamoDB rejects an empty ExpressionAttributeValues map
        if self.values:
            request["ExpressionAttributeValues"] = dict(self.values)
        return request

    def to_transact_item(self) -> dict[str, Any]:
        """The ``{"Update": {...}}`` element of a transactional write."""
        return {"Update": self.to_request()}


def chunked(
    descriptors: Sequence[OperationDescriptor], size: int = 25
) -> Iterator[list[OperationDescriptor]]:
    """Split descriptors into submission batches of at most ``size`` items."""
    if size <= 0:
        raise ValueError("size must be > 0")
    for start in range(0, len(descriptors), size):
        yield list(descriptors[start:start + size])
