"""
API server module for node status endpoints.

Provides HTTP endpoints for:
- /health - Health check endpoint
- /metrics - Prometheus metrics endpoint
- /events/subscriptions - Active subscriptions per event kind
"""

from .server import ApiServer, ApiServerConfig

__all__ = [
    "ApiServer",
    "ApiServerConfig",
]
