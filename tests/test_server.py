"""
Tests for the HTTP surface in social.graze.hdlproxy.app.server

Each test starts the full application, including registry loading at startup, against in-process
fake repositories.
"""

import base64

from aiohttp import test_utils
import pytest
import pytest_asyncio

from social.graze.hdlproxy.app.config import HandleStorageAppKey, Settings
from social.graze.hdlproxy.app.server import start_web_server
from social.graze.hdlproxy.errors import RegistryEmptyError
from social.graze.hdlproxy.model.value import HandleValue


@pytest_asyncio.fixture
async def client_factory():
    clients = []

    async def factory(settings: Settings) -> test_utils.TestClient:
        app = await start_web_server(settings)
        client = test_utils.TestClient(test_utils.TestServer(app))
        clients.append(client)
        await client.start_server()
        return client

    yield factory

    for client in clients:
        await client.close()


@pytest_asyncio.fixture
async def client(client_factory, repo1, refused_endpoint):
    return await client_factory(
        Settings(handle_endpoints=[repo1.endpoint, refused_endpoint], metrics_backend="none")
    )


class TestInternal:
    """Test suite for the internal endpoints."""

    @pytest.mark.asyncio
    async def test_alive(self, client):
        resp = await client.get("/internal/alive")
        assert resp.status == 200

    @pytest.mark.asyncio
    async def test_ready(self, client):
        resp = await client.get("/internal/ready")
        assert resp.status == 200

    @pytest.mark.asyncio
    async def test_registry(self, client, repo1):
        resp = await client.get("/internal/api/registry")
        assert resp.status == 200
        assert await resp.json() == {"10673": repo1.endpoint}

    @pytest.mark.asyncio
    async def test_refresh(self, client, repo1):
        resp = await client.post("/internal/api/registry/refresh")
        assert resp.status == 200
        assert await resp.json() == {"refreshed": True, "prefixes": 1}
        assert repo1.count("listprefixes") == 2


class TestStartup:
    """Test suite for registry loading at startup."""

    @pytest.mark.asyncio
    async def test_empty_registry_aborts_startup(self, client_factory, refused_endpoint):
        with pytest.raises(RegistryEmptyError):
            await client_factory(
                Settings(handle_endpoints=[refused_endpoint], metrics_backend="none")
            )

    @pytest.mark.asyncio
    async def test_empty_registry_degraded_startup(self, client_factory, refused_endpoint):
        client = await client_factory(
            Settings(
                handle_endpoints=[refused_endpoint],
                require_registry=False,
                metrics_backend="none",
            )
        )

        assert len(client.app[HandleStorageAppKey].registry) == 0

        resp = await client.get("/internal/ready")
        assert resp.status == 503

        resp = await client.get("/api/resolve", params={"handle": "10673/1"})
        assert (await resp.json())[0]["status"] == "not_found"

        resp = await client.post("/internal/api/registry/refresh")
        assert resp.status == 503
        assert await resp.json() == {"refreshed": False, "prefixes": 0}


class TestResolve:
    """Test suite for /api/resolve."""

    @pytest.mark.asyncio
    async def test_no_handles(self, client):
        resp = await client.get("/api/resolve")
        assert resp.status == 200
        assert await resp.json() == []

    @pytest.mark.asyncio
    async def test_found(self, client):
        resp = await client.get("/api/resolve", params={"handle": "10673/1"})
        assert resp.status == 200

        body = await resp.json()
        assert len(body) == 1
        assert body[0]["handle"] == "10673/1"
        assert body[0]["status"] == "found"

        value = body[0]["values"][0]
        assert value["type"] == "URL"
        assert value["data"] == "https://example.org/item/1"
        assert value["index"] == 100
        assert value["admin_can_read"] is True
        assert value["anyone_can_write"] is False
        assert base64.b64decode(value["encoded"]) == (
            HandleValue.for_location("https://example.org/item/1").encode()
        )

    @pytest.mark.asyncio
    async def test_multiple_handles(self, client, repo1):
        resp = await client.get(
            "/api/resolve",
            params=[("handle", "10673/1"), ("handle", "10673/999"), ("handle", "99999/1")],
        )
        body = await resp.json()

        assert [result["status"] for result in body] == ["found", "not_found", "not_found"]
        assert body[1]["values"] == []
        assert repo1.count("resolve") == 2

    @pytest.mark.asyncio
    async def test_transient_error(self, client_factory, repository_factory):
        repo = await repository_factory(["10673"], locations={"10673/1": "{broken"})
        client = await client_factory(
            Settings(handle_endpoints=[repo.endpoint], metrics_backend="none")
        )

        resp = await client.get("/api/resolve", params={"handle": "10673/1"})

        assert resp.status == 200
        assert await resp.json() == [
            {"handle": "10673/1", "status": "transient_error", "values": []}
        ]


class TestAuthority:
    """Test suite for the naming authority endpoints."""

    @pytest.mark.asyncio
    async def test_exists(self, client, repo1):
        resp = await client.get("/api/authority", params={"na": "0.NA/10673"})
        assert await resp.json() == {"na": "0.NA/10673", "exists": True}

        resp = await client.get("/api/authority", params={"na": "99999"})
        assert await resp.json() == {"na": "99999", "exists": False}

        assert repo1.count("listhandles") == 0

    @pytest.mark.asyncio
    async def test_missing_parameter(self, client):
        resp = await client.get("/api/authority")
        assert resp.status == 400

        resp = await client.get("/api/authority/handles")
        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_handles(self, client):
        resp = await client.get("/api/authority/handles", params={"na": "0.NA/10673"})
        assert resp.status == 200
        assert await resp.json() == ["10673/1", "10673/2"]

    @pytest.mark.asyncio
    async def test_handles_unknown_authority(self, client):
        resp = await client.get("/api/authority/handles", params={"na": "0.NA/99999"})
        assert resp.status == 200
        assert await resp.json() == []

    @pytest.mark.asyncio
    async def test_handles_failure(self, client_factory, repository_factory):
        repo = await repository_factory(["10673"], handles={"10673": 503})
        client = await client_factory(
            Settings(handle_endpoints=[repo.endpoint], metrics_backend="none")
        )

        resp = await client.get("/api/authority/handles", params={"na": "10673"})

        assert resp.status == 502
        assert await resp.json() == {"error": "Internal Resolution Failure"}
