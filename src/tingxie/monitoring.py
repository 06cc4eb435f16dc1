"""Prometheus metrics for scheduling and session selection."""
from prometheus_client import Counter, start_http_server

# Scheduling metrics
outcomes_applied = Counter(
    "tingxie_outcomes_total",
    "Total number of dictation outcomes applied to words",
    ["result"],
)

status_overrides = Counter(
    "tingxie_status_overrides_total",
    "Total number of manual word status overrides",
    ["status"],
)

# Session metrics
sessions_built = Counter(
    "tingxie_sessions_built_total",
    "Total number of practice sessions selected",
    ["mode"],
)

empty_sessions = Counter(
    "tingxie_empty_sessions_total",
    "Total number of selections that found nothing to review",
    ["mode"],
)

# Word management metrics
words_added = Counter(
    "tingxie_words_added_total",
    "Total number of words added to the store",
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
