"""Health endpoint handler."""

from __future__ import annotations

import json
from typing import Final

from aiohttp import web

STATUS_HEALTHY: Final = "healthy"
"""Fixed healthy status returned by the health endpoint."""

SERVICE_NAME: Final = "chain-events"
"""Fixed service identifier returned by the health endpoint."""


async def handle(_request: web.Request) -> web.Response:
    """
    Handle health check request.

    Response: JSON object with fields:
        - status (string): Always healthy when the endpoint is reachable.
        - service (string): Fixed identifier "chain-events".

    Status Codes:
        200 OK: Server is running.
    """
    return web.Response(
        body=json.dumps({"status": STATUS_HEALTHY, "service": SERVICE_NAME}),
        content_type="application/json",
    )
