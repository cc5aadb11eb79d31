"""Prometheus metrics for problem responses."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter

# Custom registry, scraped through /metrics
REGISTRY = CollectorRegistry()

problem_responses_total = Counter(
    "problem_responses_total",
    "Total number of problem detail responses emitted",
    ["status_code", "problem_type", "surface"],
    registry=REGISTRY,
)

unhandled_exceptions_total = Counter(
    "unhandled_exceptions_total",
    "Total number of exceptions translated through the generic fault path",
    ["exception_type"],
    registry=REGISTRY,
)

validation_errors_total = Counter(
    "validation_errors_total",
    "Total number of field validation errors reported",
    ["field"],
    registry=REGISTRY,
)
