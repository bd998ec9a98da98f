"""API test fixtures: ASGI client with dependency overrides."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from myrover_carrier.api.app import app
from myrover_carrier.api.deps import get_credential_store, get_shared_secret
from myrover_carrier.storage.credentials import InMemoryCredentialStore

SHARED_SECRET = "s3cret"


@pytest.fixture()
async def client(
    credential_store: InMemoryCredentialStore,
) -> AsyncGenerator[AsyncClient]:
    """AsyncClient with an isolated credential store and a known secret.

    The lifespan does not run under ASGITransport, so app.state is never
    touched; tests override the remaining dependencies they need.
    """
    app.dependency_overrides[get_credential_store] = lambda: credential_store
    app.dependency_overrides[get_shared_secret] = lambda: SHARED_SECRET
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
