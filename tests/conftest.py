"""Shared pytest fixtures."""

from collections.abc import Callable

import httpx
import pytest

from myrover_carrier.storage.credentials import InMemoryCredentialStore

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def make_http_client() -> Callable[[Handler], httpx.AsyncClient]:
    """Build AsyncClients backed by ``httpx.MockTransport``.

    Usage::

        client = make_http_client(lambda request: httpx.Response(200, json={}))
    """
    def _make(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
