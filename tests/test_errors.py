from __future__ import annotations

import pytest

from safeupdate import errors


@pytest.mark.parametrize(
    "cls",
    [
        errors.MalformedKeyError,
        errors.MalformedRequestError,
        errors.UnsupportedValueError,
        errors.EmptyUpdateError,
        errors.ActionNotPermittedError,
        errors.FieldNotWhitelistedError,
        errors.FieldBlacklistedError,
        errors.MissingMandatoryFieldError,
        errors.DuplicateFieldError,
        errors.InvalidIncrementTypeError,
        errors.InvalidAppendTypeError,
        errors.InvalidFieldValueError,
    ],
)
def test_validation_errors_carry_kind_and_code(cls) -> None:
    exc = cls("Malformed request", "Field 'x' is bad")
    assert isinstance(exc, errors.ValidationError)
    assert isinstance(exc.kind, errors.ValidationErrorKind)
    assert exc.code == 400
    assert str(exc) == "Malformed request"
    assert exc.detail == "Field 'x' is bad"


def test_each_kind_has_exactly_one_error_class() -> None:
    kinds = [cls.kind for cls in errors.ValidationError.__subclasses__()]
    assert sorted(kinds) == sorted(errors.ValidationErrorKind)


def test_detail_defaults_to_message() -> None:
    assert errors.ConfigurationError("Malformed configuration").detail == "Malformed configuration"


def test_configuration_error_is_not_a_validation_error() -> None:
    assert not issubclass(errors.ConfigurationError, errors.ValidationError)
    assert issubclass(errors.ConfigurationError, errors.SafeUpdateError)
