from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, DecimalException
from enum import Enum
from typing import Any, Mapping

from boto3.dynamodb.types import DYNAMODB_CONTEXT, TypeSerializer

from ..errors import UnsupportedValueError

_serializer = TypeSerializer()


class ValueKind(str, Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    NULL = "null"


@dataclass(frozen=True)
class Value:
    """
    A request payload value tagged with its kind.

    Containers hold tagged children: a SEQUENCE carries a tuple of Values and
    a MAPPING carries a dict of str -> Value.
    """

    kind: ValueKind
    data: Any

    @classmethod
    def of(cls, raw: Any) -> "Value":
        """
        Classify a plain Python value.

        Raises:
            UnsupportedValueError: If the value (or a nested element) has no
                representation in the store.
        """
        if isinstance(raw, Value):
            return raw
        if raw is None:
            return cls(ValueKind.NULL, None)
        # bool is an int subclass; check it first
        if isinstance(raw, bool):
            return cls(ValueKind.BOOLEAN, raw)
        if isinstance(raw, (int, float, Decimal)):
            _check_number(raw)
            return cls(ValueKind.NUMBER, raw)
        if isinstance(raw, str):
            return cls(ValueKind.STRING, raw)
        if isinstance(raw, (list, tuple)):
            return cls(ValueKind.SEQUENCE, tuple(cls.of(item) for item in raw))
        if isinstance(raw, Mapping):
            items: dict[str, Value] = {}
            for key, item in raw.items():
                if not isinstance(key, str):
                    raise UnsupportedValueError(
                        f"Unsupported mapping key: {key!r}",
                        "Mapping keys must be strings",
                    )
                items[key] = cls.of(item)
            return cls(ValueKind.MAPPING, items)
        raise UnsupportedValueError(
            f"Unsupported value type: {type(raw).__name__}",
            "Values must be numbers, strings, booleans, lists, mappings or null",
        )

    @property
    def is_number(self) -> bool:
        return self.kind is ValueKind.NUMBER

    @property
    def is_sequence(self) -> bool:
        return self.kind is ValueKind.SEQUENCE

    def to_python(self) -> Any:
        if self.kind is ValueKind.SEQUENCE:
            return [item.to_python() for item in self.data]
        if self.kind is ValueKind.MAPPING:
            return {key: item.to_python() for key, item in self.data.items()}
        return self.data

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the DynamoDB AttributeValue wire format."""
        return _serializer.serialize(self._wire_payload())

    def _wire_payload(self) -> Any:
        if self.kind is ValueKind.SEQUENCE:
            return [item._wire_payload() for item in self.data]
        if self.kind is ValueKind.MAPPING:
            return {key: item._wire_payload() for key, item in self.data.items()}
        # TypeSerializer rejects floats
        if self.kind is ValueKind.NUMBER and isinstance(self.data, float):
            return _float_to_decimal(self.data)
        return self.data


def _float_to_decimal(number: float) -> Decimal:
    return Decimal(repr(number))


def _check_number(number: Any) -> None:
    """Reject numbers the store cannot hold exactly, as boto3 would when serializing."""
    if isinstance(number, float):
        if not math.isfinite(number):
            raise UnsupportedValueError(f"Unsupported value: {number!r}", "Numbers must be finite")
        number = _float_to_decimal(number)
    elif isinstance(number, Decimal) and not number.is_finite():
        raise UnsupportedValueError(f"Unsupported value: {number!r}", "Numbers must be finite")
    try:
        DYNAMODB_CONTEXT.create_decimal(number)
    except DecimalException:
        raise UnsupportedValueError(
            f"Unsupported value: {number}",
            "Numbers must fit in 38 significant digits within the store's exponent range",
        ) from None


def to_wire(raw: Any) -> dict[str, Any]:
    """Classify and serialize a plain Python value in one step."""
    return Value.of(raw).to_wire()
