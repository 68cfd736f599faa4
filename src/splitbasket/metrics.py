"""Prometheus metrics definitions for SplitBasket."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "splitbasket_http_requests_total",
    "Total number of HTTP requests processed by the SplitBasket API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "splitbasket_http_request_duration_seconds",
    "Latency of HTTP requests processed by the SplitBasket API",
    ["method", "path"],
)

ITEM_TRANSITIONS = Counter(
    "splitbasket_item_transitions_total",
    "Grocery item link transitions by kind",
    ["transition"],
)

STORE_CONFLICTS = Counter(
    "splitbasket_store_conflicts_total",
    "Concurrent modification conflicts detected by the store",
    ["entity"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "ITEM_TRANSITIONS",
    "STORE_CONFLICTS",
]
