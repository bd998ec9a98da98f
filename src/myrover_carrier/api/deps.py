"""FastAPI dependency injection."""

from __future__ import annotations

from typing import cast

import httpx
from fastapi import Depends, Request

from myrover_carrier.auth.exchange import AuthorizationExchanger
from myrover_carrier.config import Settings, get_settings
from myrover_carrier.rates.aggregator import RateAggregator
from myrover_carrier.rates.client import MyRoverClient
from myrover_carrier.storage.credentials import CredentialStore

__all__ = [
    "get_credential_store",
    "get_exchanger",
    "get_http_client",
    "get_rate_aggregator",
    "get_settings",
    "get_shared_secret",
]

_get_settings = Depends(get_settings)


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Retrieve the shared httpx client from app state.

    Initialized during lifespan startup.
    """
    return cast(httpx.AsyncClient, request.app.state.http_client)


async def get_credential_store(request: Request) -> CredentialStore:
    """Retrieve the credential store from app state.

    Initialized during lifespan startup.
    """
    return cast(CredentialStore, request.app.state.credential_store)


_get_http_client = Depends(get_http_client)
_get_credential_store = Depends(get_credential_store)


async def get_shared_secret(settings: Settings = _get_settings) -> str:
    return settings.shared_secret


async def get_exchanger(
    http_client: httpx.AsyncClient = _get_http_client,
    store: CredentialStore = _get_credential_store,
    settings: Settings = _get_settings,
) -> AuthorizationExchanger:
    return AuthorizationExchanger(
        http_client,
        store,
        client_id=settings.bc_client_id,
        client_secret=settings.shared_secret,
        redirect_uri=settings.bc_redirect_uri,
        token_url=settings.bc_token_url,
        default_scope=settings.bc_scope,
    )


async def get_rate_aggregator(
    http_client: httpx.AsyncClient = _get_http_client,
    settings: Settings = _get_settings,
) -> RateAggregator:
    api_key = settings.myrover_api_key
    client = MyRoverClient(
        http_client,
        base_url=settings.myrover_base_url,
        api_key=api_key.get_secret_value() if api_key else None,
        services_path=settings.myrover_services_path,
        price_path=settings.myrover_price_path,
    )
    return RateAggregator(
        client,
        currency=settings.rates_currency,
        max_concurrency=settings.rates_max_concurrency,
        budget_seconds=settings.rates_budget_seconds,
    )
