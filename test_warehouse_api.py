"""
Warehouse API Client Tests

Runs the client against an in-process aiohttp backend:
1. Reference data and lists decode into models
2. HTTP, JSON and payload-shape failures map to typed errors
3. Mutations send JSON and return the backend message
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as BackendServer

from connectors.warehouse_api import (
    WarehouseApiClient,
    WarehouseApiConfig,
    WarehouseApiError,
    WarehouseConnectionError,
    WarehouseHttpError,
    WarehousePayloadError,
)
from models.records import OreBatch, Sale, TransactionalCollection
from models.reference import ReferenceSet


def run_against(routes, scenario):
    """Start a backend with the given routes and run scenario(client, received)."""
    received = []

    async def main():
        app = web.Application()
        for method, path, handler in routes:
            app.router.add_route(method, path, handler)

        @web.middleware
        async def record(request, handler):
            body = await request.json() if request.can_read_body else None
            received.append((request.method, request.path, body))
            return await handler(request)

        app.middlewares.append(record)

        async with BackendServer(app) as server:
            config = WarehouseApiConfig(base_url=str(server.make_url("/")), timeout_seconds=5)
            async with WarehouseApiClient(config) as client:
                return await scenario(client, received)

    return asyncio.run(main())


def json_handler(payload, status=200):
    async def handler(request):
        return web.json_response(payload, status=status)
    return handler


class TestConfig:
    """URL building."""

    def test_build_url_joins_prefix(self):
        config = WarehouseApiConfig(base_url="http://backend:8080/")
        assert config.build_url("ore-batches") == "http://backend:8080/api/ore-batches"

    def test_build_url_without_prefix(self):
        config = WarehouseApiConfig(base_url="http://backend", api_prefix="")
        assert config.build_url("/logs") == "http://backend/logs"


class TestReads:
    """GET endpoints."""

    def test_reference_data(self):
        payload = {
            "units": [{"id": 1, "name": "t", "symbol": "t"}],
            "warehouses": [{"id": 2, "name": "North", "location": "Pit 3"}],
            "ore_types": [],
            "equipment_categories": [],
            "contractors": [],
            "transport": None,
        }

        async def scenario(client, received):
            return await client.get_reference_data()

        refs = run_against([("GET", "/api/reference-data", json_handler(payload))], scenario)

        assert isinstance(refs, ReferenceSet)
        assert refs.units[0].symbol == "t"
        assert refs.warehouses[0].location == "Pit 3"
        assert refs.transport == []

    def test_list_ore_batches(self):
        payload = [
            {"id": 1, "ore_type_id": 5, "warehouse_id": 2, "unit_id": 1, "quantity": 80.5},
            {"id": 2, "ore_type_id": 6, "warehouse_id": 2, "unit_id": 1, "quantity": 300, "extra": "ignored"},
        ]

        async def scenario(client, received):
            return await client.list_collection("ore_batches")

        records = run_against([("GET", "/api/ore-batches", json_handler(payload))], scenario)

        assert all(isinstance(r, OreBatch) for r in records)
        assert [r.quantity for r in records] == [80.5, 300.0]

    def test_null_list_is_empty(self):
        async def scenario(client, received):
            return await client.list_collection(TransactionalCollection.SHIPMENTS)

        records = run_against([("GET", "/api/shipments", json_handler(None))], scenario)

        assert records == []

    def test_legacy_sales(self):
        payload = [{"id": 3, "ore_type": "Iron", "buyer": "", "quantity": 100, "status": "Written off",
                    "created_at": "2025-10-10T10:00:00Z"}]

        async def scenario(client, received):
            return await client.list_collection("sales")

        records = run_against([("GET", "/api/sales", json_handler(payload))], scenario)

        assert isinstance(records[0], Sale)
        assert records[0].status == "Written off"


class TestErrors:
    """Failure classification."""

    def test_http_error_status(self):
        async def scenario(client, received):
            with pytest.raises(WarehouseHttpError) as exc_info:
                await client.get_reference_data()
            return exc_info.value

        error = run_against(
            [("GET", "/api/reference-data", json_handler({"error": "db down"}, status=500))],
            scenario,
        )

        assert error.status_code == 500
        assert "db down" in error.response_body

    def test_invalid_json(self):
        async def handler(request):
            return web.Response(text="<html>oops</html>", content_type="application/json")

        async def scenario(client, received):
            with pytest.raises(WarehousePayloadError):
                await client.list_collection("orders")

        run_against([("GET", "/api/orders", handler)], scenario)

    def test_body_that_is_not_utf8(self):
        async def handler(request):
            return web.Response(body=b"[\xff\xfe]", content_type="application/json")

        async def scenario(client, received):
            with pytest.raises(WarehousePayloadError) as exc_info:
                await client.list_collection("orders")
            return exc_info.value

        error = run_against([("GET", "/api/orders", handler)], scenario)

        assert error.status_code == 200
        assert "Undecodable body" in str(error)

    def test_undecodable_list_is_swallowed_by_synchronizer(self):
        from core.observability.metrics import FetchMetrics
        from refsync.context import SyncContext
        from refsync.synchronizer import ReferenceSynchronizer

        async def handler(request):
            return web.Response(body=b"[\xff\xfe]", content_type="application/json")

        async def scenario(client, received):
            context = SyncContext()
            context.replace_collection("orders", [])
            sync = ReferenceSynchronizer(client, context, FetchMetrics())
            return await sync.load_collection("orders"), sync.metrics.get_summary()

        result, summary = run_against([("GET", "/api/orders", handler)], scenario)

        assert result is None
        assert summary["fetches"]["by_collection"]["orders"]["failed"] == 1

    def test_wrong_shape(self):
        async def scenario(client, received):
            with pytest.raises(WarehousePayloadError):
                await client.list_collection("equipment")
            with pytest.raises(WarehousePayloadError):
                await client.get_reference_data()

        run_against([
            ("GET", "/api/equipment", json_handler({"not": "a list"})),
            ("GET", "/api/reference-data", json_handler({"units": [{"id": 1}]})),
        ], scenario)

    def test_connection_refused(self):
        async def main():
            config = WarehouseApiConfig(base_url="http://127.0.0.1:1", timeout_seconds=2)
            async with WarehouseApiClient(config) as client:
                with pytest.raises(WarehouseConnectionError):
                    await client.list_collection("logs")

        asyncio.run(main())

    def test_not_connected(self):
        client = WarehouseApiClient()

        with pytest.raises(WarehouseApiError):
            asyncio.run(client.list_collection("logs"))


class TestMutations:
    """POST and PUT endpoints."""

    def test_create_posts_json_and_returns_message(self):
        async def scenario(client, received):
            return await client.create("ore_batches", {"ore_type_id": 5, "quantity": 120.0})

        result = run_against(
            [("POST", "/api/ore-batches", json_handler({"message": "Ore batch added", "id": 42}))],
            scenario,
        )

        assert result.message == "Ore batch added"
        assert result.id == 42

    def test_create_sends_body(self):
        async def scenario(client, received):
            await client.create("shipments", {"order_id": 1, "transport_id": 8})
            return received

        received = run_against(
            [("POST", "/api/shipments", json_handler({"message": "ok"}))],
            scenario,
        )

        assert received == [("POST", "/api/shipments", {"order_id": 1, "transport_id": 8})]

    def test_update_sale_uses_put_with_id_in_path(self):
        async def scenario(client, received):
            result = await client.update_sale(7, {"id": 7, "status": "Shipped"})
            return result, received

        result, received = run_against(
            [("PUT", "/api/sales/{id}", json_handler({"message": "Status updated"}))],
            scenario,
        )

        assert result.message == "Status updated"
        assert received[0][:2] == ("PUT", "/api/sales/7")

    def test_non_object_mutation_response(self):
        async def scenario(client, received):
            with pytest.raises(WarehousePayloadError):
                await client.create("orders", {"contractor_id": 1})

        run_against([("POST", "/api/orders", json_handler(["unexpected"]))], scenario)
