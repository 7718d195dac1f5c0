"""Tests for DataStoreClient against a mocked HTTP transport."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from frontdesk.clients import query as q
from frontdesk.clients.data_store_client import (
    DataStoreAuthenticationError,
    DataStoreClient,
    DataStoreClientError,
    DataStoreConflictError,
    DataStoreServerError,
)
from frontdesk.config.settings import BackendSettings, Settings


@pytest.fixture
def backend_settings():
    return Settings(
        backend=BackendSettings(url="https://hotel.example.com", anon_key="anon", max_retries=3)
    )


def make_client(backend_settings, handler):
    return DataStoreClient(backend_settings, transport=httpx.MockTransport(handler))


class TestDataStoreClient:
    """Tests for DataStoreClient."""

    @pytest.mark.asyncio
    async def test_select_builds_request(self, backend_settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=[{"id": "room-101", "number": "101"}])

        async with make_client(backend_settings, handler) as client:
            rows = await client.select(
                "rooms",
                filters=[q.eq("is_active", True)],
                order=[q.asc("number")],
            )

        request = seen["request"]
        assert rows == [{"id": "room-101", "number": "101"}]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/rooms"
        assert request.url.params["is_active"] == "eq.true"
        assert request.url.params["order"] == "number.asc"
        assert request.headers["apikey"] == "anon"
        assert request.headers["authorization"] == "Bearer anon"

    @pytest.mark.asyncio
    async def test_access_token_used_after_sign_in(self, backend_settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(200, json=[])

        client = make_client(backend_settings, handler)
        client.set_access_token("user-token")
        try:
            assert await client.select_one("rooms") is None
        finally:
            await client.close()

        assert seen["auth"] == "Bearer user-token"

    @pytest.mark.asyncio
    async def test_insert_returns_created_row(self, backend_settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["prefer"] = request.headers.get("prefer")
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json=[{"id": "g-1", "name": "Jane Doe"}])

        async with make_client(backend_settings, handler) as client:
            row = await client.insert("guests", {"name": "Jane Doe"})

        assert row == {"id": "g-1", "name": "Jane Doe"}
        assert seen["prefer"] == "return=representation"
        assert seen["body"] == {"name": "Jane Doe"}

    @pytest.mark.asyncio
    async def test_update_requires_filters(self, backend_settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[])

        async with make_client(backend_settings, handler) as client:
            with pytest.raises(DataStoreClientError, match="without filters"):
                await client.update("rooms", {"status": "available"}, [])

        assert calls == []

    @pytest.mark.asyncio
    async def test_conditional_update_with_no_match(self, backend_settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[])

        async with make_client(backend_settings, handler) as client:
            rows = await client.update(
                "reservations",
                {"status": "checked_in"},
                [q.eq("id", "res-1"), q.eq("status", "booked")],
            )

        assert rows == []
        assert seen["params"] == {"id": "eq.res-1", "status": "eq.booked"}

    @pytest.mark.asyncio
    async def test_auth_error_not_retried(self, backend_settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(401, json={"message": "JWT expired"})

        async with make_client(backend_settings, handler) as client:
            with pytest.raises(DataStoreAuthenticationError, match="JWT expired") as exc_info:
                await client.select("rooms")

        assert exc_info.value.status_code == 401
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_conflict_message_includes_details(self, backend_settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                409,
                json={
                    "message": "duplicate key value violates unique constraint",
                    "details": "Key (number)=(101) already exists.",
                },
            )

        async with make_client(backend_settings, handler) as client:
            with pytest.raises(DataStoreConflictError) as exc_info:
                await client.insert("rooms", {"number": "101"})

        assert "Key (number)=(101) already exists." in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self, backend_settings):
        responses = iter([httpx.Response(503, text="unavailable"), httpx.Response(200, json=[])])

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses)

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()) as sleep:
            async with make_client(backend_settings, handler) as client:
                assert await client.select("rooms") == []

        sleep.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_server_error_after_retries(self, backend_settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500, json={"message": "boom"})

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(backend_settings, handler) as client:
                with pytest.raises(DataStoreServerError, match="boom"):
                    await client.select("rooms")

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_transport_error_after_retries(self, backend_settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(backend_settings, handler) as client:
                with pytest.raises(DataStoreClientError, match="connection refused"):
                    await client.select("rooms")

    @pytest.mark.asyncio
    async def test_insert_read_timeout_not_resent(self, backend_settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()) as sleep:
            async with make_client(backend_settings, handler) as client:
                with pytest.raises(DataStoreClientError, match="Request timeout for reservations"):
                    await client.insert("reservations", {"room_id": "room-101"})

        assert len(calls) == 1
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_dropped_connection_not_resent(self, backend_settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.RemoteProtocolError("server disconnected", request=request)

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(backend_settings, handler) as client:
                with pytest.raises(DataStoreClientError, match="server disconnected"):
                    await client.update("rooms", {"status": "occupied"}, [q.eq("id", "room-101")])

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_insert_server_error_not_resent(self, backend_settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502, text="bad gateway")

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(backend_settings, handler) as client:
                with pytest.raises(DataStoreServerError):
                    await client.insert("guests", {"name": "Jane Doe"})

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_insert_connect_error_retried(self, backend_settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(201, json=[{"id": "guest-2", "name": "Jane Doe"}])

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()) as sleep:
            async with make_client(backend_settings, handler) as client:
                row = await client.insert("guests", {"name": "Jane Doe"})

        assert row["id"] == "guest-2"
        assert len(calls) == 2
        sleep.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_select_read_timeout_retried(self, backend_settings):
        responses = iter([None, httpx.Response(200, json=[])])

        def handler(request: httpx.Request) -> httpx.Response:
            response = next(responses)
            if response is None:
                raise httpx.ReadTimeout("timed out", request=request)
            return response

        with patch("frontdesk.clients.data_store_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(backend_settings, handler) as client:
                assert await client.select("rooms") == []
