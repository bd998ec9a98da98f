"""HTTP client for the MyRover pricing API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from myrover_carrier.errors import UpstreamUnavailableError
from myrover_carrier.rates.models import ServiceOffering, ShipmentQuoteRequest

logger = structlog.get_logger()


class MyRoverClient:
    """Thin wrapper over the two MyRover endpoints the aggregator needs.

    Every transport, status, or parse failure surfaces as
    ``UpstreamUnavailableError`` so callers handle a single error type.
    The shared ``httpx.AsyncClient`` owns timeouts and connection pooling.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str,
        api_key: str | None = None,
        services_path: str = "/services",
        price_path: str = "/get-price",
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._services_url = f"{self._base_url}{services_path}"
        self._price_url = f"{self._base_url}{price_path}"
        self._headers = {"Authorization": api_key} if api_key else {}

    async def list_services(self) -> list[ServiceOffering]:
        """Fetch available service offerings.

        Entries that fail validation are skipped.

        Raises:
            UpstreamUnavailableError: On network, HTTP status or body errors.
        """
        body = await self._request("GET", self._services_url)
        raw_services = body.get("services") if isinstance(body, dict) else None
        if not isinstance(raw_services, list):
            raise UpstreamUnavailableError("services response has no 'services' list")

        offerings: list[ServiceOffering] = []
        for raw in raw_services:
            try:
                offerings.append(ServiceOffering.model_validate(raw))
            except ValidationError:
                logger.warning("myrover_service_skipped", service=raw)
        return offerings

    async def get_price(
        self,
        service: ServiceOffering,
        request: ShipmentQuoteRequest,
    ) -> float | None:
        """Quote one service for the shipment.

        Returns:
            The upstream cost, or None when the response carries no
            numeric cost.

        Raises:
            UpstreamUnavailableError: On network, HTTP status or body errors.
        """
        payload: dict[str, Any] = {
            "service_id": service.id,
            "pickup_address": request.origin.as_line(),
            "drop_address": request.destination.as_line(),
            "pickup_postal_code": request.origin.postal_code,
            "drop_postal_code": request.destination.postal_code,
        }
        weight = request.total_weight_kg()
        if weight is not None:
            payload["weight"] = weight

        body = await self._request("POST", self._price_url, json=payload)
        return _extract_cost(body)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(
                method, url, headers=self._headers, **kwargs
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailableError(
                f"{method} {url} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(
                f"{method} {url} failed: {type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise UpstreamUnavailableError(f"{method} {url} returned invalid JSON") from exc


def _extract_cost(body: Any) -> float | None:
    """Read ``data.cost`` (or a top-level ``cost``) as float."""
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    cost = data.get("cost") if isinstance(data, dict) else body.get("cost")
    if isinstance(cost, bool) or cost is None:
        return None
    try:
        return float(cost)
    except (TypeError, ValueError):
        return None
