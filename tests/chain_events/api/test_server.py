"""Tests for the status API server."""

from __future__ import annotations

import asyncio

import httpx

from chain_events import EventBroadcastHub, EventKind
from chain_events.api import ApiServer, ApiServerConfig


class TestApiServerConfiguration:
    """Tests for API server configuration behavior."""

    def test_default_config_uses_standard_port(self) -> None:
        """Default configuration uses port 5052 and binds to all interfaces."""
        config = ApiServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 5052
        assert config.enabled is True

    def test_custom_config_values_are_respected(self) -> None:
        """Custom configuration values override defaults."""
        config = ApiServerConfig(host="127.0.0.1", port=8080, enabled=False)

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.enabled is False


class TestApiServerHubIntegration:
    """Tests for API server integration with the event hub."""

    def test_server_created_without_hub(self) -> None:
        """Server can be created before the hub is available."""
        server = ApiServer(config=ApiServerConfig())

        assert server.hub is None

    def test_hub_getter_provides_access_to_hub(self) -> None:
        """Hub getter callable provides access to the hub."""
        with EventBroadcastHub() as hub:
            server = ApiServer(config=ApiServerConfig(), hub_getter=lambda: hub)

            assert server.hub is hub

    async def test_disabled_server_does_not_listen(self) -> None:
        """A disabled server starts nothing."""
        server = ApiServer(config=ApiServerConfig(port=15060, enabled=False))
        await server.start()

        async with httpx.AsyncClient() as client:
            try:
                await client.get("http://127.0.0.1:15060/health")
            except httpx.ConnectError:
                pass
            else:
                raise AssertionError("disabled server accepted a connection")


class TestHealthEndpoint:
    """Tests for the /health endpoint behavior."""

    def test_returns_healthy_status_json(self) -> None:
        """Health endpoint returns JSON with healthy status."""

        async def run_test() -> None:
            server = ApiServer(config=ApiServerConfig(port=15061))
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get("http://127.0.0.1:15061/health")

                    assert response.status_code == 200
                    data = response.json()
                    assert data["status"] == "healthy"
                    assert data["service"] == "chain-events"
            finally:
                await server.stop()

        asyncio.run(run_test())


class TestMetricsEndpoint:
    """Tests for the /metrics endpoint behavior."""

    def test_returns_prometheus_text(self) -> None:
        """Metrics endpoint serves the dedicated registry."""

        async def run_test() -> None:
            server = ApiServer(config=ApiServerConfig(port=15062))
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get("http://127.0.0.1:15062/metrics")

                    assert response.status_code == 200
                    assert response.headers["content-type"].startswith("text/plain")
                    assert "chain_events_preload_phase" in response.text
            finally:
                await server.stop()

        asyncio.run(run_test())


class TestSubscriptionsEndpoint:
    """Tests for the /events/subscriptions endpoint behavior."""

    def test_returns_503_when_hub_not_initialized(self) -> None:
        """Endpoint returns 503 Service Unavailable when no hub is attached."""

        async def run_test() -> None:
            server = ApiServer(config=ApiServerConfig(port=15063))
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get("http://127.0.0.1:15063/events/subscriptions")

                    assert response.status_code == 503
            finally:
                await server.stop()

        asyncio.run(run_test())

    def test_returns_counts_per_kind(self) -> None:
        """Endpoint reports active subscriptions for every kind."""

        async def run_test() -> None:
            with EventBroadcastHub() as hub:
                hub.subscribe(EventKind.TIP_CHANGED)
                hub.subscribe_action_evaluations("Buy")

                server = ApiServer(config=ApiServerConfig(port=15064), hub_getter=lambda: hub)
                await server.start()

                try:
                    async with httpx.AsyncClient() as client:
                        response = await client.get(
                            "http://127.0.0.1:15064/events/subscriptions"
                        )

                        assert response.status_code == 200
                        assert "application/json" in response.headers["content-type"]
                        data = response.json()
                        assert data["closed"] is False
                        assert data["subscriptions"] == {
                            "tipChanged": 1,
                            "preloadProgress": 0,
                            "protocolVersionMismatch": 0,
                            "nodeFault": 0,
                            "actionEvaluated": 1,
                        }
                finally:
                    await server.stop()

        asyncio.run(run_test())
