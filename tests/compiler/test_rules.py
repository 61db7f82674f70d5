from __future__ import annotations

import pytest

from safeupdate.compiler import rules
from safeupdate.errors import InvalidFieldValueError, ValidationErrorKind


def test_rule_binds_trailing_arguments() -> None:
    check = rules.rule(rules.expect_in_range, 0, 10)
    check(5)
    with pytest.raises(InvalidFieldValueError) as exc_info:
        check(11)
    assert exc_info.value.kind is ValidationErrorKind.INVALID_FIELD_VALUE
    assert check.__name__ == "expect_in_range"


@pytest.mark.parametrize(
    "check, good, bad",
    [
        (rules.rule(rules.regex_match, r"^[a-z]+$"), "abc", "ABC"),
        (rules.rule(rules.expect_type, ["string", "null"]), None, 1),
        (rules.rule(rules.expect_type, ["number"]), 1.5, True),
        (rules.rule(rules.expect_value_in_list, ["open", "done"]), "open", "lost"),
        (rules.expect_integer, 3, 3.5),
        (rules.expect_integer, 0, -1),
        (rules.rule(rules.expect_integer, allow_negative=True), -1, "1"),
        (rules.expect_currency, 10.25, 10.255),
        (rules.expect_currency, 7, -7),
        (rules.rule(rules.expect_currency, allow_negative=True), -7.5, "7"),
        (rules.expect_iso_datetime, "2024-05-01T12:30:45.123Z", "yesterday"),
        (rules.expect_iso_date, "2024-05-01", "01/05/2024"),
        (rules.rule(rules.expect_iso_date, "%d/%m/%Y"), "01/05/2024", "2024-05-01"),
        (rules.rule(rules.expect_in_range, 0, 10, False), 5, 10),
        (rules.expect_latitude, -90, 90.5),
        (rules.expect_longitude, 180, -181),
        (rules.expect_24h_time, {"hour": 23, "minute": 59}, {"hour": 24}),
        (rules.expect_24h_time, {"hour": 0}, {"minute": 5}),
        (rules.expect_24h_time, {"hour": 1, "second": 0}, {"hour": 1, "millis": 2}),
        (rules.expect_duration, {"days": 2, "hours": 3}, {"fortnights": 1}),
        (rules.expect_duration, {"years": 1}, {}),
        (rules.expect_duration, {"weeks": 1}, {"weeks": 1.5}),
    ],
)
def test_checks(check, good, bad) -> None:
    check(good)
    with pytest.raises(InvalidFieldValueError):
        check(bad)


class TestIsoDatetime:
    @pytest.mark.parametrize(
        "value",
        [
            "2024-05-01T12:30:45.123Z",
            "2024-05-01T12:30:45Z",
            "2024-05-01T12:30:45+02:00",
            "2024-05-01T12:30:45.123456+0000",
            "2024-05-01T12:30:45",
            "2024-05-01T12:30",
            "2024-05-01",
        ],
    )
    def test_accepted_forms(self, value) -> None:
        rules.expect_iso_datetime(value)

    @pytest.mark.parametrize(
        "value",
        ["2024-05-01 12:30:45", "2024-13-01T00:00:00Z", "20240501T123045Z", "2024-05-01T25:00", 1714566645],
    )
    def test_rejected_forms(self, value) -> None:
        with pytest.raises(InvalidFieldValueError):
            rules.expect_iso_datetime(value)


class TestGeopoint:
    def test_valid_point(self) -> None:
        rules.expect_geopoint({"type": "Point", "coordinates": [-122.4, 37.8]})

    @pytest.mark.parametrize(
        "value",
        [
            {"type": "Polygon", "coordinates": [0, 0]},
            {"type": "Point", "coordinates": [0]},
            {"type": "Point", "coordinates": "0,0"},
            {"type": "Point", "coordinates": [0, 91]},
            {"type": "Point", "coordinates": [181, 0]},
            [0, 0],
        ],
    )
    def test_invalid_points(self, value) -> None:
        with pytest.raises(InvalidFieldValueError):
            rules.expect_geopoint(value)
