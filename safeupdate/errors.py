from __future__ import annotations

from enum import Enum


class SafeUpdateError(Exception):
    """Base exception for safeupdate errors."""

    code: int = 400

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or message


class ConfigurationError(SafeUpdateError, ValueError):
    """The policy configuration is structurally invalid. Fatal for the whole call."""


class ValidationErrorKind(str, Enum):
    MALFORMED_KEY = "malformed_key"
    MALFORMED_REQUEST = "malformed_request"
    UNSUPPORTED_VALUE = "unsupported_value"
    EMPTY_UPDATE = "empty_update"
    ACTION_NOT_PERMITTED = "action_not_permitted"
    FIELD_NOT_WHITELISTED = "field_not_whitelisted"
    FIELD_BLACKLISTED = "field_blacklisted"
    MISSING_MANDATORY_FIELD = "missing_mandatory_field"
    DUPLICATE_FIELD = "duplicate_field"
    INVALID_INCREMENT_TYPE = "invalid_increment_type"
    INVALID_APPEND_TYPE = "invalid_append_type"
    INVALID_FIELD_VALUE = "invalid_field_value"


class ValidationError(SafeUpdateError):
    """A single mutation request was rejected."""

    kind: ValidationErrorKind


class MalformedKeyError(ValidationError):
    kind = ValidationErrorKind.MALFORMED_KEY


class MalformedRequestError(ValidationError):
    kind = ValidationErrorKind.MALFORMED_REQUEST


class UnsupportedValueError(ValidationError):
    kind = ValidationErrorKind.UNSUPPORTED_VALUE


class EmptyUpdateError(ValidationError):
    kind = ValidationErrorKind.EMPTY_UPDATE


class ActionNotPermittedError(ValidationError):
    kind = ValidationErrorKind.ACTION_NOT_PERMITTED


class FieldNotWhitelistedError(ValidationError):
    kind = ValidationErrorKind.FIELD_NOT_WHITELISTED


class FieldBlacklistedError(ValidationError):
    kind = ValidationErrorKind.FIELD_BLACKLISTED


class MissingMandatoryFieldError(ValidationError):
    kind = ValidationErrorKind.MISSING_MANDATORY_FIELD


class DuplicateFieldError(ValidationError):
    kind = ValidationErrorKind.DUPLICATE_FIELD


class InvalidIncrementTypeError(ValidationError):
    kind = ValidationErrorKind.INVALID_INCREMENT_TYPE


class InvalidAppendTypeError(ValidationError):
    kind = ValidationErrorKind.INVALID_APPEND_TYPE


class InvalidFieldValueError(ValidationError):
    kind = ValidationErrorKind.INVALID_FIELD_VALUE
