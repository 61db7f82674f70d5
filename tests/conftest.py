from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from safeupdate.config import ActionRule, PolicyConfig
from safeupdate.compiler.models import Action


FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2024-05-01T12:30:45.123Z"


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """A clock frozen at FIXED_NOW so timestamps are predictable."""
    return lambda: FIXED_NOW


@pytest.fixture
def fixed_timestamp() -> str:
    """The lastUpdated value produced by the ``clock`` fixture."""
    return FIXED_TIMESTAMP


@pytest.fixture
def permissive_policy() -> PolicyConfig:
    """
    Every action allowed for every field, no auto fields, fail-fast.

    Tests that care about one specific rule build their own policy.
    """
    return PolicyConfig(
        action_rules={action: ActionRule(allow_all=True) for action in Action},
        fail_on_error=True,
    )


@pytest.fixture
def make_request() -> Callable[..., dict[str, Any]]:
    """
    Factory fixture for raw mutation requests.

    Usage:
        req = make_request(assign={"status": "done"}, remove=["tmp"])
    """

    def _make(pk: str = "org#1", sk: str = "user#1", **buckets: Any) -> dict[str, Any]:
        request: dict[str, Any] = {"key": {"pk": pk, "sk": sk}}
        request.update(buckets)
        return request

    return _make
