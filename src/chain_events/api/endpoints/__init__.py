"""API endpoint handlers."""

from . import health, metrics, subscriptions

__all__ = ["health", "metrics", "subscriptions"]
