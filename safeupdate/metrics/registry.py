from prometheus_client import Counter, Histogram

UPDATE_REQUESTS_TOTAL = Counter(
    "safeupdate_update_requests_total",
    "Mutation requests processed by the update compiler",
    ["table", "outcome"],
)

UPDATE_REJECTIONS_TOTAL = Counter(
    "safeupdate_update_rejections_total",
    "Mutation requests rejected by validation, by error kind",
    ["table", "kind"],
)

BATCH_COMPILE_LATENCY_SECONDS = Histogram(
    "safeupdate_batch_compile_latency_seconds",
    "Time spent compiling one batch of mutation requests",
    ["table"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)
