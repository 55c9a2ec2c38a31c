"""Subscription status endpoint handler."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from aiohttp import web

from chain_events.hub import EventBroadcastHub


def make_handler(
    hub_getter: Callable[[], EventBroadcastHub | None],
) -> Callable[[web.Request], Awaitable[web.Response]]:
    """
    Build the handler reporting active subscriptions per event kind.

    Response format:
    {
        "closed": <bool>,
        "subscriptions": {"<kind>": <count>, ...}
    }

    Status Codes:
        200 OK: Counts returned.
        503 Service Unavailable: No hub attached yet.
    """

    async def handle(_request: web.Request) -> web.Response:
        hub = hub_getter()
        if hub is None:
            raise web.HTTPServiceUnavailable(reason="Event hub not initialized")

        return web.json_response(
            {
                "closed": hub.closed,
                "subscriptions": hub.subscriber_counts(),
            }
        )

    return handle
