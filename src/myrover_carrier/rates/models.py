"""Shipment and quote models shared by the pricing client and the aggregator."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Conversion factors to kilograms
_KG_PER_UNIT: dict[str, float] = {
    "kg": 1.0,
    "g": 0.001,
    "lb": 0.45359237,
    "oz": 0.028349523125,
}


class Address(BaseModel):
    """Origin or destination of a shipment. All fields optional."""

    model_config = ConfigDict(extra="ignore")

    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = Field(
        default=None,
        validation_alias=AliasChoices("postal_code", "zip"),
    )
    country: str | None = None

    def as_line(self) -> str:
        """Single-line address, e.g. ``"1 Main St, Oakville, ON, L6H7T7"``."""
        parts = [
            self.address1,
            self.address2,
            self.city,
            self.province,
            self.postal_code,
            self.country,
        ]
        return ", ".join(p.strip() for p in parts if p and p.strip())


class Weight(BaseModel):
    value: float = Field(ge=0)
    units: Literal["kg", "g", "lb", "oz"] = "kg"

    def to_kg(self) -> float:
        return self.value * _KG_PER_UNIT[self.units]


class ShipmentItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    quantity: int = Field(default=1, ge=1)
    weight: Weight | None = None


class ShipmentQuoteRequest(BaseModel):
    """Rate request body sent by the platform checkout.

    Example::

        {
            "origin": {"postal_code": "L6H7T7"},
            "destination": {"postal_code": "M4B1B3"},
            "items": [{"quantity": 1, "weight": {"value": 1, "units": "kg"}}]
        }
    """

    model_config = ConfigDict(extra="ignore")

    origin: Address = Field(default_factory=Address)
    destination: Address = Field(default_factory=Address)
    items: list[ShipmentItem] = Field(default_factory=list)

    def total_weight_kg(self) -> float | None:
        """Sum of item weights in kg, or None when no item carries a weight."""
        weighted = [item for item in self.items if item.weight is not None]
        if not weighted:
            return None
        return sum(
            item.quantity * item.weight.to_kg()
            for item in weighted
            if item.weight is not None
        )


class ServiceOffering(BaseModel):
    """One shipping service exposed by the pricing provider."""

    model_config = ConfigDict(extra="ignore")

    # Kept as received so price lookups echo the provider's own id.
    id: int | str
    name: str
    abbreviation: str | None = None

    @property
    def code(self) -> str:
        if self.abbreviation:
            return self.abbreviation.strip().lower()
        return f"myrover_{self.id}"


class RateQuote(BaseModel):
    """Priced shipping option returned to the platform checkout."""

    code: str
    display_name: str
    cost: float = Field(ge=0)
    currency: str
