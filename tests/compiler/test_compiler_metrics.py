from __future__ import annotations

import uuid

import pytest

from safeupdate import compile_batch, compile_updates
from safeupdate.compiler.metrics import observe_batch, observe_request_compiled, observe_request_rejected
from safeupdate.config import PolicyConfig
from safeupdate.errors import ActionNotPermittedError
from safeupdate.metrics.registry import (
    BATCH_COMPILE_LATENCY_SECONDS,
    UPDATE_REJECTIONS_TOTAL,
    UPDATE_REQUESTS_TOTAL,
)


def _requests(table: str, outcome: str) -> float:
    return UPDATE_REQUESTS_TOTAL.labels(table=table, outcome=outcome)._value.get()


def _rejections(table: str, kind: str) -> float:
    return UPDATE_REJECTIONS_TOTAL.labels(table=table, kind=kind)._value.get()


def _batch_count(table: str) -> int:
    """Current sample count of the batch latency histogram."""
    for family in BATCH_COMPILE_LATENCY_SECONDS.labels(table=table).collect():
        for sample in family.samples:
            if sample.name.endswith("_count"):
                return int(sample.value)
    return 0


@pytest.fixture
def table() -> str:
    """A table name unique to the test, so counters start at zero."""
    return f"metrics_{uuid.uuid4().hex[:10]}"


class TestObserveHelpers:
    def test_compiled_increments_counter(self, table: str) -> None:
        observe_request_compiled(table)
        assert _requests(table, "compiled") == 1

    def test_rejected_increments_both_counters(self, table: str) -> None:
        observe_request_rejected(table, "duplicate_field")
        observe_request_rejected(table, "duplicate_field")
        assert _requests(table, "rejected") == 2
        assert _rejections(table, "duplicate_field") == 2
        assert _requests(table, "compiled") == 0

    def test_batch_records_latency(self, table: str) -> None:
        observe_batch(table, 0.002)
        assert _batch_count(table) == 1


class TestCompileEmitsMetrics:
    def test_collect_and_skip_batch(self, table: str, make_request, clock) -> None:
        policy = PolicyConfig(action_rules={"assign": {"allowAll": True}}, fail_on_error=False)
        requests = [
            make_request(assign={"x": 1}),
            make_request(remove=["x"]),
            make_request(assign={"y": 2}),
        ]

        result = compile_batch(table, requests, policy, clock=clock)

        assert len(result.operations) == 2
        assert _requests(table, "compiled") == 2
        assert _requests(table, "rejected") == 1
        assert _rejections(table, "action_not_permitted") == 1
        assert _batch_count(table) == 1

    def test_fail_fast_still_records_batch(self, table: str, make_request, clock) -> None:
        policy = PolicyConfig(action_rules={"assign": {"allowAll": True}})

        with pytest.raises(ActionNotPermittedError):
            compile_updates(table, [make_request(remove=["x"])], policy, clock=clock)

        assert _requests(table, "rejected") == 1
        assert _batch_count(table) == 1
