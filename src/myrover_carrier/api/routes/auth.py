"""App install lifecycle endpoints.

Routes
------
- ``GET   /auth/callback``  — OAuth redirect target, exchanges the code
- ``GET   /load``           — Admin UI load, gated by signed_payload
- ``GET   /uninstall``      — Platform uninstall callback (signed_payload)
- ``POST  /uninstall``      — Uninstall by store_hash or signed_payload
"""

from __future__ import annotations

from html import escape
from typing import Annotated

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from myrover_carrier.api.deps import (
    get_credential_store,
    get_exchanger,
    get_shared_secret,
)
from myrover_carrier.api.schemas import UninstallRequest, UninstallResponse
from myrover_carrier.auth.exchange import AuthorizationExchanger
from myrover_carrier.auth.signed_payload import (
    decode_signed_payload,
    tenant_id_from_payload,
)
from myrover_carrier.errors import (
    MissingParameterError,
    SignatureInvalidError,
    TokenExchangeError,
)
from myrover_carrier.storage.credentials import CredentialStore

logger = structlog.get_logger()

router = APIRouter(tags=["auth"])

ExchangerDep = Annotated[AuthorizationExchanger, Depends(get_exchanger)]
StoreDep = Annotated[CredentialStore, Depends(get_credential_store)]
SecretDep = Annotated[str, Depends(get_shared_secret)]

_PAGE = """<html>
  <body style="font-family: Arial; text-align:center; margin-top:50px;">
    {body}
  </body>
</html>"""


def _verified_tenant(signed_payload: str, shared_secret: str) -> str:
    """Verify a signed payload and return its store hash.

    Raises:
        HTTPException 401: invalid signature or payload without a store.
    """
    try:
        data = decode_signed_payload(signed_payload, shared_secret)
    except SignatureInvalidError as exc:
        logger.warning("signed_payload_rejected", error=str(exc))
        raise HTTPException(status_code=401, detail="Invalid signed payload") from exc

    tenant_id = tenant_id_from_payload(data)
    if tenant_id is None:
        raise HTTPException(status_code=401, detail="Signed payload has no store")
    return tenant_id


@router.get("/auth/callback", response_class=HTMLResponse)
async def auth_callback(
    exchanger: ExchangerDep,
    code: str = "",
    context: str = "",
    scope: str = "",
) -> HTMLResponse:
    """Exchange the authorization code and store the access token.

    Raises:
        HTTPException 400: ``code`` or ``context`` missing.
        HTTPException 400: token endpoint rejected the code with an
            error status; the upstream error body is returned.
        HTTPException 500: token endpoint unreachable or answered
            without an access token.
    """
    try:
        credential = await exchanger.exchange(code, context, scope)
    except MissingParameterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TokenExchangeError as exc:
        rejected = exc.status_code is not None and exc.status_code >= 400
        raise HTTPException(
            status_code=400 if rejected else 500,
            detail={
                "message": str(exc),
                "upstream_status": exc.status_code,
                "upstream_error": exc.detail,
            },
        ) from exc

    store = escape(credential.tenant_id)
    return HTMLResponse(
        _PAGE.format(
            body=f"<h2>MyRover Carrier App Installed Successfully for {store}</h2>"
        )
    )


@router.get("/load", response_class=HTMLResponse)
async def load(
    store: StoreDep,
    shared_secret: SecretDep,
    signed_payload: str = "",
) -> HTMLResponse:
    """Render the admin dashboard for a verified store."""
    if not signed_payload:
        raise HTTPException(status_code=400, detail="Missing signed_payload")

    tenant_id = _verified_tenant(signed_payload, shared_secret)
    connected = store.get(tenant_id) is not None
    status = (
        "Your app is successfully connected to BigCommerce."
        if connected
        else "No access token is stored for this store. Reinstall the app."
    )
    return HTMLResponse(
        _PAGE.format(
            body=(
                "<h1>MyRover Carrier Dashboard</h1>"
                f"<p>Store: {escape(tenant_id)}</p>"
                f"<p>{status}</p>"
                "<p>Use MyRover to get live delivery quotes in your checkout!</p>"
            )
        )
    )


def _uninstall(tenant_id: str, store: CredentialStore) -> UninstallResponse:
    removed = store.delete(tenant_id)
    logger.info("app_uninstalled", tenant_id=tenant_id, removed=removed)
    return UninstallResponse(removed=removed)


@router.get("/uninstall")
async def uninstall_signed(
    store: StoreDep,
    shared_secret: SecretDep,
    signed_payload: Annotated[str, Query()] = "",
) -> UninstallResponse:
    """Platform uninstall callback."""
    if not signed_payload:
        raise HTTPException(status_code=400, detail="Missing signed_payload")
    return _uninstall(_verified_tenant(signed_payload, shared_secret), store)


@router.post("/uninstall")
async def uninstall(
    store: StoreDep,
    shared_secret: SecretDep,
    body: Annotated[UninstallRequest | None, Body()] = None,
) -> UninstallResponse:
    """Remove the stored credential for a store.

    A ``signed_payload`` takes precedence over a plain ``store_hash``.
    """
    body = body or UninstallRequest()
    if body.signed_payload:
        tenant_id = _verified_tenant(body.signed_payload, shared_secret)
    elif body.store_hash:
        tenant_id = body.store_hash
    else:
        raise HTTPException(status_code=400, detail="Missing store_hash")
    return _uninstall(tenant_id, store)
