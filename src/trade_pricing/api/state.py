"""
Shared calculator instance for the API.

Built on first use from the CSV exports named in Settings; routes receive it
through the ``get_calculator`` dependency so tests can override it.
"""
from functools import lru_cache

from ..config.settings import get_settings
from ..data.store import CsvPricingStore
from ..engine import CountryTaxRules, OrderTotalCalculator, PricingTier, ShippingEstimator, VolumePricing


@lru_cache(maxsize=1)
def get_calculator() -> OrderTotalCalculator:
    settings = get_settings()
    store = CsvPricingStore(settings)
    rules = CountryTaxRules.from_settings(settings)
    shipping = ShippingEstimator(store.shipping_rates(), rules=rules, default=settings.default_shipping)
    volume = VolumePricing(
        store.standard_ladder(),
        store.premium_ladder(),
        store.tool_discounts(),
        max_qty_per_sku={
            PricingTier.STANDARD: settings.max_qty_standard,
            PricingTier.PREMIUM: settings.max_qty_premium,
        },
    )
    return OrderTotalCalculator(store, shipping=shipping, settings=settings, volume=volume)


def reload_calculator() -> OrderTotalCalculator:
    """Drop the cached calculator so the next request reloads data from disk."""
    get_calculator.cache_clear()
    return get_calculator()
