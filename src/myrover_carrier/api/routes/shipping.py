"""Carrier endpoints called by the platform's shipping service."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from myrover_carrier.api.deps import get_rate_aggregator
from myrover_carrier.api.schemas import ConnectionResponse, RatesResponse
from myrover_carrier.rates.aggregator import RateAggregator
from myrover_carrier.rates.models import ShipmentQuoteRequest

logger = structlog.get_logger()

router = APIRouter(tags=["shipping"])

AggregatorDep = Annotated[RateAggregator, Depends(get_rate_aggregator)]


@router.api_route("/connection", methods=["GET", "POST"])
async def connection() -> ConnectionResponse:
    """Connection test used by the platform to mark the carrier connected."""
    logger.info("connection_check_received")
    return ConnectionResponse()


@router.post("/rates")
async def rates(
    shipment: ShipmentQuoteRequest,
    aggregator: AggregatorDep,
) -> RatesResponse:
    """Quote a shipment. Always responds 200 with at least one rate."""
    logger.info(
        "rate_request_received",
        origin=shipment.origin.postal_code,
        destination=shipment.destination.postal_code,
        items=len(shipment.items),
    )
    return RatesResponse(data=await aggregator.get_rates(shipment))
