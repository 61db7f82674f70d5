"""
Reusable value checks for ``PolicyConfig.value_rules``.

Each check takes the plain Python value as its first argument and raises
``InvalidFieldValueError`` when it does not hold. Use ``rule()`` to bind the
remaining arguments:

    PolicyConfig(
        action_rules={"assign": {"allowAll": True}},
        value_rules={
            "status": [rule(expect_value_in_list, ["open", "done"])],
            "location": [expect_geopoint],
        },
    )
"""
from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Pattern, Sequence, Union

from ..errors import InvalidFieldValueError

_TYPE_NAMES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float, Decimal),
    "boolean": (bool,),
    "list": (list, tuple),
    "mapping": (dict,),
    "null": (type(None),),
}

_CURRENCY = re.compile(r"^\d+(?:\.\d{1,2})?$")

# Accepted on every supported Python; %z takes "Z", "+0000" and "+00:00"
_ISO_DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
)

_TIME_UNITS = {"hour": 23, "minute": 59, "second": 59}
_DURATION_UNITS = ("years", "months", "weeks", "days", "hours", "minutes", "seconds")
_TIME_FORMAT = "Invalid time format: Expected {hour: <0-23>, minute?: <0-59>, second?: <0-59>}"
_DURATION_FORMAT = (
    "Invalid duration format: Expected {years?: <number>, months?: <number>, "
    "weeks?: <number>, days?: <number>, hours?: <number>, minutes?: <number>, "
    "seconds?: <number>}"
)


def rule(check: Callable[..., None], *args: Any, **kwargs: Any) -> Callable[[Any], None]:
    """Bind the arguments that follow the value, giving a one-argument rule."""

    def bound(value: Any) -> None:
        check(value, *args, **kwargs)

    bound.__name__ = getattr(check, "__name__", "rule")
    return bound


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def regex_match(value: Any, pattern: Union[str, Pattern[str]]) -> None:
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    if not regex.search(str(value)):
        raise InvalidFieldValueError(
            f"Invalid value: Expected {value!r} to match regex: {regex.pattern}"
        )


def expect_type(value: Any, types: Iterable[str]) -> None:
    """``types`` uses the tagged value names: string, number, boolean, list, mapping, null."""
    names = list(types)
    for name in names:
        if name == "number":
            if _is_number(value):
                return
        elif isinstance(value, _TYPE_NAMES.get(name, ())):
            return
    raise InvalidFieldValueError(f"Invalid type: Expected {value!r} to be one of type: {names}")


def expect_value_in_list(value: Any, allowed: Sequence[Any]) -> None:
    if value not in allowed:
        raise InvalidFieldValueError(f"Invalid value: Expected {value!r} to be one of {list(allowed)}")


def expect_integer(value: Any, allow_negative: bool = False) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidFieldValueError(f"Invalid value: Expected {value!r} to be an integer")
    if not allow_negative and value < 0:
        raise InvalidFieldValueError(f"Invalid value: Expected {value!r} to be a positive integer")


def expect_currency(value: Any, allow_negative: bool = False) -> None:
    """A number with at most two decimal places."""
    expect_type(value, ["number"])
    if not allow_negative and value < 0:
        raise InvalidFieldValueError("Invalid value: Expected currency value to be positive")
    regex_match(abs(Decimal(str(value))), _CURRENCY)


def expect_iso_datetime(value: Any) -> None:
    if not isinstance(value, str):
        raise InvalidFieldValueError("Invalid date format: Expected ISO 8601 date string")
    for date_format in _ISO_DATETIME_FORMATS:
        try:
            datetime.strptime(value, date_format)
        except ValueError:
            continue
        return
    raise InvalidFieldValueError("Invalid date format: Expected ISO 8601 date string")


def expect_iso_date(value: Any, date_format: str = "%Y-%m-%d") -> None:
    try:
        datetime.strptime(value, date_format)
    except (TypeError, ValueError):
        raise InvalidFieldValueError(
            f"Date or date format is invalid: Expected ISO date string in the format {date_format}"
        ) from None


def expect_in_range(value: Any, minimum: Any, maximum: Any, inclusive: bool = True) -> None:
    expect_type(value, ["number"])
    if inclusive:
        if value < minimum or value > maximum:
            raise InvalidFieldValueError(
                f"Invalid value: Expected {value} to be equal to or between {minimum} and {maximum}"
            )
    elif value <= minimum or value >= maximum:
        raise InvalidFieldValueError(
            f"Invalid value: Expected {value} to be between {minimum} and {maximum}"
        )


def expect_latitude(value: Any) -> None:
    expect_in_range(value, -90, 90)


def expect_longitude(value: Any) -> None:
    expect_in_range(value, -180, 180)


def expect_geopoint(value: Any) -> None:
    """GeoJSON point: ``{"type": "Point", "coordinates": [longitude, latitude]}``."""
    if not isinstance(value, dict) or value.get("type") != "Point":
        raise InvalidFieldValueError("Invalid geopoint type: Expected 'type' to be 'Point'")
    coords = value.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        raise InvalidFieldValueError(
            "Invalid geopoint coordinates: Expected coordinates to be an array with two elements"
        )
    expect_longitude(coords[0])
    expect_latitude(coords[1])


def expect_24h_time(value: Any) -> None:
    """``{"hour": 0-23, "minute"?: 0-59, "second"?: 0-59}``."""
    if not isinstance(value, dict) or "hour" not in value:
        raise InvalidFieldValueError(_TIME_FORMAT)
    for unit, amount in value.items():
        if unit not in _TIME_UNITS:
            raise InvalidFieldValueError(_TIME_FORMAT)
        expect_integer(amount)
        if amount > _TIME_UNITS[unit]:
            raise InvalidFieldValueError(_TIME_FORMAT)


def expect_duration(value: Any) -> None:
    """Any non-empty subset of years, months, weeks, days, hours, minutes, seconds."""
    if not isinstance(value, dict) or not value:
        raise InvalidFieldValueError(_DURATION_FORMAT)
    for unit, amount in value.items():
        if unit not in _DURATION_UNITS:
            raise InvalidFieldValueError(_DURATION_FORMAT)
        expect_integer(amount)
