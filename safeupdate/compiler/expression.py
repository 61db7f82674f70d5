from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from ..errors import EmptyUpdateError
from .models import ClassifiedFields, MutationRequest
from .values import Value

logger = logging.getLogger(__name__)

# Field names usable verbatim in a placeholder token. Anything else gets a
# positional token; those start with "_", as do the reserved ones below.
_PLAIN_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

START_ZERO = ":_start_zero"
START_EMPTY = ":_start_empty"


@dataclass(frozen=True)
class UpdateExpression:
    expression: str
    names: dict[str, str]
    values: dict[str, Any]


def _token(field: str, position: int) -> str:
    if _PLAIN_NAME.match(field):
        return field
    return f"_f{position}"


def compile_expression(fields: ClassifiedFields, request: MutationRequest) -> UpdateExpression:
    """
    Build a ``SET ... REMOVE ...`` update expression for a validated request.

    Every field is referenced through a ``#name`` placeholder and every value
    through a ``:name`` placeholder. Increments and appends are guarded with
    ``if_not_exists`` so a missing attribute starts at 0 or an empty list.
    Output depends only on the inputs, so compiling twice yields identical
    results.

    Raises:
        EmptyUpdateError: The request targets no fields at all
    """
    if fields.is_empty():
        raise EmptyUpdateError(
            "Malformed request: Nothing to update",
            "At least one of assign, remove, increment or append must name a field",
        )

    tokens = {field: _token(field, i) for i, field in enumerate(fields.all_fields())}
    names: dict[str, str] = {}
    values: dict[str, Any] = {}

    def name_of(field: str) -> str:
        placeholder = f"#{tokens[field]}"
        names[placeholder] = field
        return placeholder

    def value_of(field: str, value: Value) -> str:
        placeholder = f":{tokens[field]}"
        values[placeholder] = value.to_wire()
        return placeholder

    set_items: list[str] = []
    for field in fields.assign:
        name = name_of(field)
        set_items.append(f"{name} = {value_of(field, request.assign[field])}")

    if fields.increment:
        values[START_ZERO] = Value.of(0).to_wire()
        for field in fields.increment:
            name = name_of(field)
            value = value_of(field, request.increment[field])
            set_items.append(f"{name} = if_not_exists({name}, {START_ZERO}) + {value}")

    if fields.append:
        values[START_EMPTY] = Value.of([]).to_wire()
        for field in fields.append:
            name = name_of(field)
            value = value_of(field, request.append[field])
            set_items.append(
                f"{name} = list_append(if_not_exists({name}, {START_EMPTY}), {value})"
            )

    clauses: list[str] = []
    if set_items:
        clauses.append("SET " + ", ".join(set_items))
    if fields.remove:
        clauses.append("REMOVE " + ", ".join(name_of(field) for field in fields.remove))

    expression = " ".join(clauses)
    logger.debug(
        "Update expression: %s names=%s values=%s", expression, names, values
    )
    return UpdateExpression(expression=expression, names=names, values=values)
