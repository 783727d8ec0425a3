"""Shared fixtures for integration tests.

Each test builds its own application from a set of endpoint classes and
endpoint options, then talks to it through an in-process ASGI transport.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator, Iterable

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.main import create_app
from src.api.sending.options import EndpointOptions
from src.core.config import Settings, get_settings
from src.core.context import RequestContext

type ClientFactoryType = Callable[..., Awaitable[AsyncClient]]


@pytest.fixture
async def client_factory() -> AsyncGenerator[ClientFactoryType]:
    """Factory fixture for creating test clients serving given endpoints.

    Usage:
        async def test_something(client_factory):
            client = await client_factory([GetUser], settings=Settings(debug=False))
    """
    clients = []

    async def _create_client(
        endpoints: Iterable[type] = (),
        *,
        settings: Settings | None = None,
        options: EndpointOptions | None = None,
    ) -> AsyncClient:
        settings = settings or Settings()
        app = create_app(settings, endpoints=endpoints, options=options)
        app.dependency_overrides[get_settings] = lambda: settings

        transport = ASGITransport(app=app)
        client = AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _create_client

    for client in clients:
        await client.aclose()


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear the settings cache around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Clear RequestContext around each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()
