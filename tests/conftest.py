"""
Shared test configuration and fixtures for hdlproxy tests.

Provides in-process fake repositories that serve the `listprefixes`, `listhandles` and `resolve`
JSON APIs and record every request they receive, plus a shared HTTP client session.
"""

from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port
import pytest
import pytest_asyncio

from social.graze.hdlproxy.registry.prefixes import PrefixRegistry


def _respond(body: Any) -> web.Response:
    # Strings are served verbatim so tests can return malformed JSON.
    if isinstance(body, str):
        return web.Response(text=body, content_type="application/json")
    if isinstance(body, int):
        return web.Response(status=body)
    return web.json_response(body)


class FakeRepository:
    """
    A remote repository serving its JSON API below `/x`.

    Handles without an explicit location resolve to `[]`.
    """

    def __init__(
        self,
        prefixes: Any,
        handles: Optional[Dict[str, Any]] = None,
        locations: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.prefixes = prefixes
        self.handles = handles or {}
        self.locations = locations or {}
        self.requests: List[str] = []
        self.server: Optional[TestServer] = None

    @property
    def endpoint(self) -> str:
        assert self.server is not None
        return str(self.server.make_url("/x"))

    async def handle_listprefixes(self, request: web.Request):
        self.requests.append(request.path)
        return _respond(self.prefixes)

    async def handle_listhandles(self, request: web.Request):
        self.requests.append(request.path)
        return _respond(self.handles.get(request.match_info["prefix"], []))

    async def handle_resolve(self, request: web.Request):
        self.requests.append(request.path)
        return _respond(self.locations.get(request.match_info["handle"], []))

    def make_app(self) -> web.Application:
        app = web.Application()
        app.add_routes(
            [
                web.get("/x/listprefixes", self.handle_listprefixes),
                web.get("/x/listhandles/{prefix}", self.handle_listhandles),
                web.get("/x/resolve/{handle:.+}", self.handle_resolve),
            ]
        )
        return app

    def count(self, operation: str) -> int:
        return len([path for path in self.requests if path.startswith(f"/x/{operation}")])


@pytest_asyncio.fixture
async def repository_factory():
    """Start fake repositories on demand and shut them all down after the test."""
    servers: List[TestServer] = []

    async def factory(*args, **kwargs) -> FakeRepository:
        repository = FakeRepository(*args, **kwargs)
        repository.server = TestServer(repository.make_app())
        await repository.server.start_server()
        servers.append(repository.server)
        return repository

    yield factory

    for server in servers:
        await server.close()


@pytest_asyncio.fixture
async def http_session():
    async with aiohttp.ClientSession() as session:
        yield session


@pytest_asyncio.fixture
async def repo1(repository_factory):
    """The repository from the resolution scenarios, owning prefix 10673."""
    return await repository_factory(
        ["10673"],
        handles={"10673": ["10673/1", "10673/2"]},
        locations={
            "10673/1": ["https://example.org/item/1"],
            "10673/2": ["https://example.org/item/2"],
            "10673/999": [None],
        },
    )


@pytest_asyncio.fixture
async def repo1_registry(repo1) -> PrefixRegistry:
    return PrefixRegistry({"10673": repo1.endpoint})


@pytest.fixture
def refused_endpoint() -> str:
    """An endpoint nothing listens on."""
    return f"http://127.0.0.1:{unused_port()}/x"
