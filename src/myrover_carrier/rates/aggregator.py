"""Multi-service rate aggregation with static fallback.

Flow for one rate request:

1. Discover service offerings from the pricing provider.
2. Quote every offering concurrently; each lookup fails in isolation.
3. Keep quotes with a strictly positive cost.
4. When nothing usable remains, return the fixed standard/express pair.

The checkout must never see an empty rate list, so ``get_rates`` does
not raise.
"""

from __future__ import annotations

import asyncio
import math
from contextlib import AbstractAsyncContextManager, nullcontext

import structlog

from myrover_carrier.errors import NoQuotableOfferingError, UpstreamUnavailableError
from myrover_carrier.rates.client import MyRoverClient
from myrover_carrier.rates.models import RateQuote, ServiceOffering, ShipmentQuoteRequest

logger = structlog.get_logger()

DEFAULT_CURRENCY = "CAD"


def fallback_rates(currency: str = DEFAULT_CURRENCY) -> list[RateQuote]:
    """Static quotes used when the pricing provider yields nothing."""
    return [
        RateQuote(
            code="standard",
            display_name="Standard Shipping",
            cost=10.5,
            currency=currency,
        ),
        RateQuote(
            code="express",
            display_name="Express Shipping",
            cost=25.0,
            currency=currency,
        ),
    ]


class RateAggregator:
    """Fan out price lookups across all MyRover service offerings.

    Args:
        client: Pricing API client.
        currency: Currency code stamped on every quote.
        max_concurrency: Upper bound on in-flight price lookups.
            None issues one concurrent lookup per offering.
        budget_seconds: Deadline for one whole rate request. When it
            passes, pending lookups are cancelled and the fallback is
            returned. None disables the deadline.
    """

    def __init__(
        self,
        client: MyRoverClient,
        *,
        currency: str = DEFAULT_CURRENCY,
        max_concurrency: int | None = None,
        budget_seconds: float | None = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if budget_seconds is not None and budget_seconds <= 0:
            raise ValueError("budget_seconds must be > 0")
        self._client = client
        self._currency = currency
        self._max_concurrency = max_concurrency
        self._budget_seconds = budget_seconds

    async def get_rates(self, request: ShipmentQuoteRequest) -> list[RateQuote]:
        """Return positive-cost quotes, or the static fallback pair."""
        try:
            async with asyncio.timeout(self._budget_seconds):
                return await self._collect_quotes(request)
        except TimeoutError:
            logger.warning(
                "rates_fallback_used",
                reason="deadline_exceeded",
                budget_seconds=self._budget_seconds,
            )
        except (UpstreamUnavailableError, NoQuotableOfferingError) as exc:
            logger.warning(
                "rates_fallback_used",
                reason=type(exc).__name__,
                error=str(exc),
            )
        except Exception:
            logger.exception("rates_fallback_used", reason="unexpected_error")
        return fallback_rates(self._currency)

    async def _collect_quotes(self, request: ShipmentQuoteRequest) -> list[RateQuote]:
        offerings = await self._client.list_services()
        if not offerings:
            raise UpstreamUnavailableError("pricing provider returned no services")

        limiter: AbstractAsyncContextManager[object] = (
            asyncio.Semaphore(self._max_concurrency)
            if self._max_concurrency is not None
            else nullcontext()
        )

        async def _quote(offering: ServiceOffering) -> RateQuote | None:
            async with limiter:
                cost = await self._client.get_price(offering, request)
            if cost is None or not math.isfinite(cost) or cost <= 0:
                return None
            return RateQuote(
                code=offering.code,
                display_name=offering.name,
                cost=cost,
                currency=self._currency,
            )

        results = await asyncio.gather(
            *(_quote(offering) for offering in offerings),
            return_exceptions=True,
        )

        quotes: list[RateQuote] = []
        for offering, result in zip(offerings, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    "rate_lookup_failed",
                    service_id=offering.id,
                    error=str(result),
                    error_type=type(result).__name__,
                )
            elif result is None:
                logger.debug("rate_not_quotable", service_id=offering.id)
            else:
                quotes.append(result)

        if not quotes:
            raise NoQuotableOfferingError(
                f"none of {len(offerings)} services returned a positive cost"
            )

        logger.info(
            "rates_aggregated",
            services=len(offerings),
            quotes=len(quotes),
        )
        return quotes
