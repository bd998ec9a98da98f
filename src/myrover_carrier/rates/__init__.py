"""Shipping rate quoting via the MyRover pricing API."""

from myrover_carrier.rates.aggregator import RateAggregator, fallback_rates
from myrover_carrier.rates.client import MyRoverClient
from myrover_carrier.rates.models import (
    Address,
    RateQuote,
    ServiceOffering,
    ShipmentItem,
    ShipmentQuoteRequest,
    Weight,
)

__all__ = [
    "Address",
    "MyRoverClient",
    "RateAggregator",
    "RateQuote",
    "ServiceOffering",
    "ShipmentItem",
    "ShipmentQuoteRequest",
    "Weight",
    "fallback_rates",
]
