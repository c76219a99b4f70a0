"""Prometheus metrics for insight volume, generation latency, and user engagement"""

from typing import List
from prometheus_client import Counter, Histogram
from insights_gateway.domain.models import Insight

# Generation metrics
insights_generated_counter = Counter(
    "insights_generated_total",
    "Insights produced by generation runs",
    ["type", "priority"],
)

generation_duration_histogram = Histogram(
    "insight_generation_seconds",
    "Time to fetch finance data and run the insight engine",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

generation_skipped_counter = Counter(
    "insight_generation_skipped_total",
    "Generation requests skipped because insights were generated recently",
)

# Finance API metrics
finance_fetch_failures_counter = Counter(
    "finance_fetch_failures_total",
    "Failed finance data API calls",
)

# Engagement
insight_events_counter = Counter(
    "insight_events_total",
    "User interactions with stored insights",
    ["event"],  # dismissed | snoozed | marked_helpful | marked_not_helpful | action_taken | expired
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_generation(insights: List[Insight]) -> None:
    """Count generated insights by type and priority"""
    for insight in insights:
        insights_generated_counter.labels(
            type=insight.type.value,
            priority=insight.priority.value,
        ).inc()
