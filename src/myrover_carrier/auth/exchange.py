"""OAuth authorization-code exchange against the BigCommerce token endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from myrover_carrier.auth.context import TenantCredential
from myrover_carrier.errors import MissingParameterError, TokenExchangeError

if TYPE_CHECKING:
    from myrover_carrier.storage.credentials import CredentialStore

logger = structlog.get_logger()

STORE_CONTEXT_PREFIX = "stores/"


def tenant_id_from_context(context: str) -> str:
    """Strip the ``stores/`` prefix from an OAuth context value.

    >>> tenant_id_from_context("stores/abc123")
    'abc123'
    """
    return context.strip().removeprefix(STORE_CONTEXT_PREFIX).strip("/")


class AuthorizationExchanger:
    """Trade a short-lived authorization code for a store access token.

    The resulting credential is written to the credential store keyed by
    store hash. Nothing is written when the exchange fails.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: CredentialStore,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        token_url: str,
        default_scope: str = "",
    ) -> None:
        self._http = http_client
        self._store = store
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._token_url = token_url
        self._default_scope = default_scope

    async def exchange(self, code: str, context: str, scope: str) -> TenantCredential:
        """Exchange ``code`` for an access token and store it.

        Args:
            code: Authorization code from the OAuth redirect.
            context: ``stores/{store_hash}`` value from the redirect.
            scope: Space-separated scopes granted to the app. The
                configured default is sent when empty.

        Returns:
            The stored credential.

        Raises:
            MissingParameterError: If ``code`` or ``context`` is empty, or
                no store hash can be derived from the context.
            TokenExchangeError: If the token endpoint is unreachable or
                responds without an ``access_token``.
        """
        if not code:
            raise MissingParameterError("code")
        if not context:
            raise MissingParameterError("context")

        scope = scope or self._default_scope
        log = logger.bind(context=context)
        payload = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "redirect_uri": self._redirect_uri,
            "grant_type": "authorization_code",
            "code": code,
            "scope": scope,
            "context": context,
        }

        try:
            response = await self._http.post(self._token_url, json=payload)
        except httpx.HTTPError as exc:
            log.error("token_exchange_request_failed", error=type(exc).__name__)
            raise TokenExchangeError(
                f"Token endpoint unreachable: {type(exc).__name__}"
            ) from exc

        body = _parse_body(response)
        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token:
            log.warning(
                "token_exchange_failed",
                status_code=response.status_code,
                upstream_error=body,
            )
            raise TokenExchangeError(
                "Token endpoint returned no access_token",
                status_code=response.status_code,
                detail=body,
            )

        tenant_id = tenant_id_from_context(str(body.get("context") or context))
        if not tenant_id:
            raise MissingParameterError("context")

        user = body.get("user") if isinstance(body.get("user"), dict) else {}
        credential = TenantCredential(
            tenant_id=tenant_id,
            access_token=str(access_token),
            scope=str(body.get("scope") or scope),
            user_id=user.get("id"),
            user_email=user.get("email"),
        )
        self._store.set(tenant_id, credential)
        log.info("token_exchange_succeeded", tenant_id=tenant_id)
        return credential


def _parse_body(response: httpx.Response) -> Any:
    """Return the JSON body, or the raw text when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text
