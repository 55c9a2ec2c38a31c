"""
Metric registry using prometheus_client.

Provides pre-defined metrics for event fan-out.
Exposes metrics in Prometheus text format via the /metrics endpoint.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

# Create a dedicated registry for chain event metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Publishing
# -----------------------------------------------------------------------------

events_published = Counter(
    "chain_events_published_total",
    "Events accepted by a channel",
    ["kind"],
    registry=REGISTRY,
)

events_rejected = Counter(
    "chain_events_rejected_total",
    "Publish calls rejected for malformed input",
    ["kind"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Delivery
# -----------------------------------------------------------------------------

events_delivered = Counter(
    "chain_events_delivered_total",
    "Events handed to subscription queues",
    ["kind"],
    registry=REGISTRY,
)

events_dropped = Counter(
    "chain_events_dropped_total",
    "Events evicted from a full subscription queue",
    ["kind"],
    registry=REGISTRY,
)

subscriber_failures = Counter(
    "chain_events_subscriber_failures_total",
    "Subscriptions cancelled because delivery to them failed",
    ["kind"],
    registry=REGISTRY,
)

active_subscriptions = Gauge(
    "chain_events_active_subscriptions",
    "Subscriptions currently attached to a channel",
    ["kind"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Preload
# -----------------------------------------------------------------------------

preload_phase = Gauge(
    "chain_events_preload_phase",
    "Phase number of the running preload (0 when idle)",
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
