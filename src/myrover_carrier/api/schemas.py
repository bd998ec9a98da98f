"""Request/response schemas for the API layer."""

from __future__ import annotations

from pydantic import BaseModel, Field

from myrover_carrier.rates.models import RateQuote

# --- Shipping ---


class ConnectionResponse(BaseModel):
    """Acknowledgment the platform expects from the connection test."""

    success: bool = True
    message: str = "MyRover Carrier connected successfully"


class RatesResponse(BaseModel):
    """Response for ``POST /v1/shipping/rates``.

    Example::

        {
            "data": [
                {"code": "sd", "display_name": "Same Day",
                 "cost": 12.0, "currency": "CAD"}
            ]
        }
    """

    data: list[RateQuote] = Field(
        description="Quotes for the shipment. Never empty."
    )


# --- Install lifecycle ---


class UninstallRequest(BaseModel):
    """Body for ``POST /api/uninstall``.

    Either a plain ``store_hash`` or a ``signed_payload`` identifying the store.
    """

    store_hash: str | None = None
    signed_payload: str | None = None


class UninstallResponse(BaseModel):
    success: bool = True
    removed: bool = Field(description="Whether a stored credential was deleted.")
