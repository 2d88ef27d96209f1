"""Prometheus metrics for list synchronisation and customer mutations."""

from prometheus_client import Counter, Histogram

# Fetch metrics
FETCH_COUNT = Counter(
    "crmsync_fetch_count_total",
    "Total number of list fetches resolved",
    labelnames=["outcome"],
)

FETCH_LATENCY = Histogram(
    "crmsync_fetch_latency_seconds",
    "Round-trip latency of list fetches",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

STALE_RESPONSES = Counter(
    "crmsync_stale_responses_total",
    "Responses discarded because a newer fetch had been issued",
)

SEARCH_COMMITS = Counter(
    "crmsync_search_commits_total",
    "Debounced search terms committed to a fetch",
)

# Mutation metrics
MUTATION_COUNT = Counter(
    "crmsync_mutation_count_total",
    "Customer create/update/delete calls",
    labelnames=["operation", "outcome"],
)
