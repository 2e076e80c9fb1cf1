"""
Volume Pricing - Quantity ladders for list-priced consumables and tools.

Cart-level adjustments from the quote builder. They only touch lines that
resolved to the BASE price; negotiated (CUSTOM) and distributor (STANDARD)
prices are never laddered, and their quantities do not count.

- Standard-tier consumables share one unit price: the standard ladder band
  for their combined quantity.
- Premium-tier consumables get a percentage off per SKU from the premium
  ladder.
- Tools get a percentage off from the tool discount bands, keyed on the
  combined tool quantity.

Bands are inclusive at both ends. A quantity no band covers uses the top
band. Standard and premium SKUs over the per-SKU maximum are reported as
validation errors; the cart is still priced.
"""
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..config.logging import get_logger
from .models import LadderBand, OrderLine, PriceSource, PricingTier, Product, ProductType
from .vat_resolver import quantize_money

logger = get_logger(__name__)

DEFAULT_MAX_QTY_PER_SKU = {
    PricingTier.STANDARD: 15,
    PricingTier.PREMIUM: 10,
}


def _prepare_bands(bands: Iterable[LadderBand], label: str, percent: bool = False) -> list[LadderBand]:
    """Validate bands and return the active ones, lowest first."""
    active = []
    for band in bands:
        if band.min_qty < 1 or band.max_qty < band.min_qty:
            raise ValueError(f"{label} band {band.min_qty}-{band.max_qty} is not a valid quantity range")
        if band.value < 0 or (percent and band.value > 100):
            raise ValueError(f"{label} band {band.min_qty}-{band.max_qty} has an invalid value {band.value}")
        if band.active:
            active.append(band)
    return sorted(active, key=lambda b: b.min_qty)


def find_band(quantity: int, bands: Sequence[LadderBand]) -> Optional[LadderBand]:
    """Band covering the quantity, else the top band. None for an empty ladder."""
    for band in bands:
        if band.min_qty <= quantity <= band.max_qty:
            return band
    return bands[-1] if bands else None


def discounted(unit_price: Decimal, percent: Decimal) -> Decimal:
    return quantize_money(unit_price * (Decimal("100") - percent) / Decimal("100"))


class VolumePricing:
    """Applies the ladders to a priced cart."""

    def __init__(
        self,
        standard_ladder: Iterable[LadderBand] = (),
        premium_ladder: Iterable[LadderBand] = (),
        tool_discounts: Iterable[LadderBand] = (),
        max_qty_per_sku: Optional[dict] = None,
    ):
        self.standard_ladder = _prepare_bands(standard_ladder, "Standard ladder")
        self.premium_ladder = _prepare_bands(premium_ladder, "Premium ladder", percent=True)
        self.tool_discounts = _prepare_bands(tool_discounts, "Tool discount", percent=True)
        self.max_qty_per_sku = {
            PricingTier(tier): int(qty)
            for tier, qty in (DEFAULT_MAX_QTY_PER_SKU if max_qty_per_sku is None else max_qty_per_sku).items()
        }

    def standard_unit_price(self, total_quantity: int) -> Optional[Decimal]:
        band = find_band(total_quantity, self.standard_ladder)
        return None if band is None else Decimal(band.value)

    def premium_discount(self, quantity: int) -> Decimal:
        """Percentage off for one premium SKU."""
        band = find_band(quantity, self.premium_ladder)
        return Decimal("0") if band is None else Decimal(band.value)

    def tool_discount(self, total_quantity: int) -> Decimal:
        """Percentage off every list-priced tool in the cart."""
        band = find_band(total_quantity, self.tool_discounts)
        return Decimal("0") if band is None else Decimal(band.value)

    def check_max_quantities(self, priced: Sequence[tuple[OrderLine, Product]]) -> list[str]:
        errors = []
        for line, product in priced:
            limit = self.max_qty_per_sku.get(product.pricing_tier)
            if limit is not None and line.quantity > limit:
                errors.append(f"{line.product_code}: Maximum {limit} units per SKU (you have {line.quantity})")
        return errors

    def apply(self, priced: Sequence[tuple[OrderLine, Product]]) -> list[str]:
        """
        Reprice BASE lines in place.

        Args:
            priced: Order lines paired with their catalog products

        Returns:
            Validation errors for SKUs over their per-SKU maximum
        """
        base = [(line, product) for line, product in priced if line.price_source == PriceSource.BASE]
        standard = [(line, p) for line, p in base if p.pricing_tier == PricingTier.STANDARD]
        premium = [(line, p) for line, p in base if p.pricing_tier == PricingTier.PREMIUM]
        tools = [(line, p) for line, p in base if p.pricing_tier is None and p.type == ProductType.TOOL]

        errors = self.check_max_quantities(standard + premium)

        if standard:
            total = sum(line.quantity for line, _ in standard)
            unit_price = self.standard_unit_price(total)
            if unit_price is not None:
                note = f"Tier pricing: {total} total units @ £{unit_price:.2f}"
                for line, _ in standard:
                    self._reprice(line, unit_price, note)

        for line, _ in premium:
            percent = self.premium_discount(line.quantity)
            if percent > 0 and line.unit_price > 0:
                self._reprice(line, discounted(line.unit_price, percent), f"{percent:.0f}% volume discount")

        if tools:
            total = sum(line.quantity for line, _ in tools)
            percent = self.tool_discount(total)
            if percent > 0:
                note = f"{total} tools - {percent:.0f}% off"
                for line, _ in tools:
                    if line.unit_price > 0:
                        self._reprice(line, discounted(line.unit_price, percent), note)

        if errors:
            logger.warning("Per-SKU quantity limits exceeded", errors=errors)
        return errors

    @staticmethod
    def _reprice(line: OrderLine, unit_price: Decimal, note: str):
        line.add_trace("Volume Pricing", note, f"£{unit_price}")
        line.unit_price = unit_price
        line.line_total = unit_price * line.quantity
        line.discount_applied = note
