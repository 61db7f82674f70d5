from .registry import (
    BATCH_COMPILE_LATENCY_SECONDS,
    UPDATE_REJECTIONS_TOTAL,
    UPDATE_REQUESTS_TOTAL,
)

__all__ = [
    "UPDATE_REQUESTS_TOTAL",
    "UPDATE_REJECTIONS_TOTAL",
    "BATCH_COMPILE_LATENCY_SECONDS",
]
