"""
API tests for the order read endpoints, served in-process over httpx.
"""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from order_query_service.app.api.deps import get_async_session
from order_query_service.app.main import app


@pytest.fixture
async def client(seeded_database) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests read from the seeded test store."""

    async def override_session():
        async with seeded_database.async_session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


class TestOrdersEndpoint:
    @pytest.mark.asyncio
    async def test_orders_camel_case_envelope(self, client):
        response = await client.get("/api/v5/orders")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        order = body["data"][0]
        assert set(order) == {
            "orderId",
            "name",
            "orderDate",
            "orderStatus",
            "address",
            "orderItems",
        }
        assert order["orderItems"][0] == {
            "itemName": "JPA1 BOOK",
            "orderPrice": 10000,
            "count": 1,
        }

    @pytest.mark.asyncio
    async def test_every_version_serves_the_same_body(self, client):
        expected = (await client.get("/api/v1/orders")).json()

        for version in ("v2", "v3", "v3.1", "v4", "v5", "v6"):
            response = await client.get(f"/api/{version}/orders")
            assert response.status_code == 200
            assert response.json() == expected, version

    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["v3", "v6"])
    async def test_paging_row_multiplying_version_rejected(self, client, version):
        response = await client.get(f"/api/{version}/orders", params={"limit": 10})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "pagination_not_supported"
        assert error["details"] == {"strategy": version}

    @pytest.mark.asyncio
    async def test_paging_batch_fetch(self, client):
        response = await client.get("/api/v3.1/orders", params={"offset": 1, "limit": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["data"][0]["name"] == "userB"
        assert len(body["data"][0]["orderItems"]) == 2

    @pytest.mark.asyncio
    async def test_member_name_filter(self, client):
        response = await client.get("/api/v4/orders", params={"memberName": "userA"})

        assert [order["name"] for order in response.json()["data"]] == ["userA"]

    @pytest.mark.asyncio
    async def test_member_name_wildcard_is_literal(self, client):
        response = await client.get("/api/v5/orders", params={"memberName": "%"})

        assert response.status_code == 200
        assert response.json() == {"count": 0, "data": []}

    @pytest.mark.asyncio
    async def test_unknown_version(self, client):
        response = await client.get("/api/v9/orders")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "unknown_strategy"

    @pytest.mark.asyncio
    async def test_invalid_limit(self, client):
        response = await client.get("/api/v5/orders", params={"limit": 0})

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "validation_error"

    @pytest.mark.asyncio
    async def test_correlation_id_echoed(self, client):
        response = await client.get(
            "/api/v9/orders", headers={"X-Correlation-ID": "order-read-42"}
        )

        assert response.headers["X-Correlation-ID"] == "order-read-42"
        assert response.json()["error"]["correlation_id"] == "order-read-42"


class TestSimpleOrdersEndpoint:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["v1", "v2", "v3", "v4"])
    async def test_simple_orders(self, client, version):
        response = await client.get(f"/api/{version}/simple-orders")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert all("orderItems" not in order for order in body["data"])
        assert body["data"][0]["address"]["zipcode"] == "1111"

    @pytest.mark.asyncio
    async def test_simple_orders_unsupported_version(self, client):
        response = await client.get("/api/v5/simple-orders")

        assert response.status_code == 404


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
