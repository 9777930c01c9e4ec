from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "taskboard_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "taskboard_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

TASKS_CREATED_TOTAL = get_or_create_metric(
    "taskboard_tasks_created_total",
    "Tasks persisted, by write path",
    Counter,
    labelnames=["source"],
)

TRANSCRIPT_EXTRACTIONS_TOTAL = get_or_create_metric(
    "taskboard_transcript_extractions_total",
    "Transcript extractions, by outcome (llm or fallback)",
    Counter,
    labelnames=["source"],
)

TASKS_STORED = get_or_create_metric(
    "taskboard_tasks_stored", "Tasks currently stored", Gauge
)
