from __future__ import annotations

from .models import ClassifiedFields, MutationRequest


def classify(request: MutationRequest) -> ClassifiedFields:
    """
    Split a request's target fields by action.

    Purely structural: ``remove`` is already a list of names, the other buckets
    contribute their keys in insertion order. Nothing is validated here.
    """
    return ClassifiedFields(
        assign=tuple(request.assign),
        remove=tuple(request.remove),
        increment=tuple(request.increment),
        append=tuple(request.append),
    )
