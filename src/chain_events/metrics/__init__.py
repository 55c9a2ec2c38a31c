"""
Metrics module for observability.

Provides counters and gauges for tracking event fan-out behavior.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    active_subscriptions,
    events_delivered,
    events_dropped,
    events_published,
    events_rejected,
    generate_metrics,
    preload_phase,
    subscriber_failures,
)

__all__ = [
    "REGISTRY",
    "active_subscriptions",
    "events_delivered",
    "events_dropped",
    "events_published",
    "events_rejected",
    "generate_metrics",
    "preload_phase",
    "subscriber_failures",
]
