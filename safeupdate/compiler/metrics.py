from __future__ import annotations

from ..metrics.registry import (
    BATCH_COMPILE_LATENCY_SECONDS,
    UPDATE_REJECTIONS_TOTAL,
    UPDATE_REQUESTS_TOTAL,
)


def observe_request_compiled(table: str) -> None:
    UPDATE_REQUESTS_TOTAL.labels(table=table, outcome="compiled").inc()


def observe_request_rejected(table: str, kind: str) -> None:
    UPDATE_REQUESTS_TOTAL.labels(table=table, outcome="rejected").inc()
    UPDATE_REJECTIONS_TOTAL.labels(table=table, kind=kind).inc()


def observe_batch(table: str, latency_s: float) -> None:
    BATCH_COMPILE_LATENCY_SECONDS.labels(table=table).observe(latency_s)
