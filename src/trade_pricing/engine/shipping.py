"""
Shipping Estimator - Predicts shipping for a destination and order subtotal.

The rate table is injected (static rows, CSV export or a database snapshot).
A destination with no active rate falls back to the configured default, 0.
"""
from decimal import Decimal
from typing import Iterable, Optional

from ..config.logging import get_logger
from .country_rules import CountryTaxRules
from .models import ShippingRate

logger = get_logger(__name__)


class ShippingEstimator:
    """
    Looks up shipping charges by country and subtotal bracket.

    For a destination, the active rate with the highest ``min_order_value``
    not above the subtotal applies. Orders at or over that rate's
    ``free_shipping_threshold`` ship free.
    """

    def __init__(
        self,
        rates: Iterable[ShippingRate] = (),
        rules: Optional[CountryTaxRules] = None,
        default: Decimal = Decimal("0"),
    ):
        self.rules = rules or CountryTaxRules()
        self.default = Decimal(default)
        if self.default < 0:
            raise ValueError("Default shipping must be non-negative")

        self._rates: dict[str, list[ShippingRate]] = {}
        for rate in rates:
            if rate.rate < 0:
                raise ValueError(f"Shipping rate for {rate.country_code} must be non-negative")
            if not rate.active:
                continue
            code = self.rules.normalize(rate.country_code)
            self._rates.setdefault(code, []).append(rate)

        # Highest bracket first
        for brackets in self._rates.values():
            brackets.sort(key=lambda r: r.min_order_value, reverse=True)

    def has_rate(self, destination_country: str) -> bool:
        """Whether any active rate exists for the destination."""
        return self.rules.normalize(destination_country) in self._rates

    def find_rate(self, destination_country: str, order_subtotal: Decimal) -> Optional[ShippingRate]:
        """Return the applicable rate row, or None on a miss."""
        code = self.rules.normalize(destination_country)
        for rate in self._rates.get(code, []):
            if rate.min_order_value <= order_subtotal:
                return rate
        return None

    def estimate(self, destination_country: str, order_subtotal: Decimal) -> Decimal:
        """
        Predicted shipping for a destination.

        Args:
            destination_country: Shipping address country (never the billing country)
            order_subtotal: Merchandise subtotal

        Returns:
            Non-negative shipping charge
        """
        order_subtotal = Decimal(order_subtotal)
        rate = self.find_rate(destination_country, order_subtotal)

        if rate is None:
            logger.warning(
                "No shipping rate for destination, using default",
                country=self.rules.normalize(destination_country),
                subtotal=str(order_subtotal),
                default=str(self.default),
            )
            return self.default

        if rate.free_shipping_threshold is not None and order_subtotal >= rate.free_shipping_threshold:
            return Decimal("0")

        return Decimal(rate.rate)
