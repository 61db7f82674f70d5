from __future__ import annotations

import logging

from ..config import PolicyConfig
from ..errors import (
    ActionNotPermittedError,
    DuplicateFieldError,
    FieldBlacklistedError,
    FieldNotWhitelistedError,
    InvalidAppendTypeError,
    InvalidFieldValueError,
    InvalidIncrementTypeError,
    MissingMandatoryFieldError,
)
from .models import ACTION_ORDER, ClassifiedFields, MutationRequest

logger = logging.getLogger(__name__)


def validate(
    fields: ClassifiedFields,
    request: MutationRequest,
    policy: PolicyConfig,
) -> None:
    """
    Check one classified request against the policy.

    Order matters: per-action permission checks (assign, remove, increment,
    append), then the duplicate check across the whole request, then value
    types, then per-field value rules on assigned values.

    Raises:
        ValidationError: One of its subclasses, on the first violation found
    """
    for action in ACTION_ORDER:
        action_fields = fields.for_action(action)
        if not action_fields:
            continue

        rule = policy.rule_for(action)
        if rule is None or not rule.grants_anything:
            raise ActionNotPermittedError(
                f"Malformed request: Invalid action '{action.value}'",
                f"Action '{action.value}' is not permitted here.",
            )

        if not rule.allow_all:
            if rule.whitelist is not None:
                for field in action_fields:
                    if field not in rule.whitelist:
                        raise FieldNotWhitelistedError(
                            f"Field '{field}' is not whitelisted for this action ({action.value}).",
                            f"Malformed request: Updating field '{field}' is not permitted.",
                        )

            if rule.blacklist is not None:
                for field in action_fields:
                    if field in rule.blacklist:
                        raise FieldBlacklistedError(
                            f"Field '{field}' is blacklisted for this action ({action.value}).",
                            f"Malformed request: Updating field '{field}' is not permitted.",
                        )

        if rule.mandatory_fields:
            for field in sorted(rule.mandatory_fields):
                if field not in action_fields:
                    raise MissingMandatoryFieldError(
                        f"Malformed request: Missing mandatory field '{field}'",
                        f"Field '{field}' was expected in action {action.value}.",
                    )

    # Cumulative over every bucket, so a name repeated inside `remove` counts too
    seen: set[str] = set()
    for field in fields.all_fields():
        if field in seen:
            raise DuplicateFieldError(
                f"Malformed request: Duplicate field '{field}' detected",
                f"Field '{field}' is present in multiple expressions",
            )
        seen.add(field)

    for field in fields.increment:
        if not request.increment[field].is_number:
            raise InvalidIncrementTypeError(
                "Malformed request: Invalid field type in 'increment' action list",
                f"Field '{field}' must be a number",
            )

    for field in fields.append:
        if not request.append[field].is_sequence:
            raise InvalidAppendTypeError(
                "Malformed request: Invalid field type in 'append' action list",
                f"Field '{field}' must be a list",
            )

    if policy.value_rules:
        for field in fields.assign:
            for check in policy.value_rules.get(field, ()):
                try:
                    check(request.assign[field].to_python())
                except InvalidFieldValueError as exc:
                    raise InvalidFieldValueError(
                        f"Malformed request: Invalid value for field '{field}'",
                        exc.message,
                    ) from exc

    logger.debug("Validated fields for key %s: %s", request.key, fields)
