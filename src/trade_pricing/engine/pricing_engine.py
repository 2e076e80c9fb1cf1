"""
Order Total Calculator - Composes price resolution, shipping and VAT.

Pipeline for every order, quote or pricing preview:
1. Validate all lines (quantity > 0, known product) before pricing anything
2. Resolve each unit price (Custom → Standard → Base)
3. Volume ladders on list-priced lines, when configured
4. Subtotal, then predicted shipping for the shipping destination
5. VAT on subtotal + shipping
6. Total = subtotal + shipping + VAT
"""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from ..config.logging import get_logger, quote_context
from ..config.settings import Settings, get_settings
from .country_rules import CountryTaxRules
from .errors import InvalidAmount, InvalidLineItem, MissingCompany
from .models import CartLine, Company, OrderLine, OrderTotals, Quote, QuoteRequest
from .price_resolver import PriceResolver
from .shipping import ShippingEstimator
from .vat_resolver import VATResolver, quantize_money
from .volume_pricing import VolumePricing

if TYPE_CHECKING:
    from ..data.store import PricingStore

logger = get_logger(__name__)


class OrderTotalCalculator:
    """
    Core calculator that prices a cart for a company and destination.

    All collaborators are injected; the calculator keeps no state between
    calls, so the same inputs always produce the same totals. The shipping
    collaborator only needs ``estimate``; ``find_rate`` or ``has_rate``, when
    present, are used to flag rate-table misses on the quote.
    """

    def __init__(
        self,
        store: PricingStore,
        shipping: Optional[ShippingEstimator] = None,
        vat: Optional[VATResolver] = None,
        settings: Optional[Settings] = None,
        volume: Optional[VolumePricing] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.rules = CountryTaxRules.from_settings(self.settings)
        self.prices = PriceResolver(store)
        self.shipping = shipping or ShippingEstimator(rules=self.rules, default=self.settings.default_shipping)
        self.vat = vat or VATResolver(self.rules, self.settings.standard_vat_rate)
        self.volume = volume

    def quote(self, request: QuoteRequest) -> Quote:
        """
        Price a request that identifies the company by id.

        Raises:
            MissingCompany: company id does not resolve
            InvalidLineItem: bad quantity or unknown product
        """
        company = self.store.get_company(request.company_id)
        if company is None:
            raise MissingCompany(request.company_id)
        return self.calculate(
            company,
            request.lines,
            request.shipping_country,
            free_shipping=request.free_shipping,
        )

    def calculate(
        self,
        company: Company,
        lines: Iterable[CartLine],
        shipping_destination_country: str,
        free_shipping: bool = False,
    ) -> Quote:
        """
        Calculate totals with a per-line breakdown.

        Args:
            company: Buying company (type and VAT number drive pricing and tax)
            lines: Requested product codes and quantities
            shipping_destination_country: Country of the shipping address
            free_shipping: Waive shipping regardless of the rate table

        Returns:
            Quote with immutable OrderTotals, lines, trace and warnings
        """
        lines = [self._cart_line(line) for line in lines]
        destination = self.rules.normalize(shipping_destination_country)

        with quote_context(company.company_id, destination):
            # Fail the whole order before any pricing work
            self._validate_lines(lines)

            order_lines = [self._price_line(company, line) for line in lines]
            validation_errors = []
            if self.volume is not None:
                validation_errors = self.volume.apply(
                    [(line, self.store.get_product(line.product_code)) for line in order_lines]
                )
            for line in order_lines:
                line.add_trace("Extension", f"Quantity {line.quantity} × £{line.unit_price}", f"£{line.line_total}")

            subtotal = sum((line.line_total for line in order_lines), Decimal("0"))

            # Nothing ships for an empty cart
            ship = bool(order_lines) and not free_shipping
            if ship:
                predicted_shipping = self.shipping.estimate(destination, subtotal)
            else:
                predicted_shipping = Decimal("0")

            taxable_amount = subtotal + predicted_shipping
            treatment = self.vat.resolve(taxable_amount, destination, company.vat_number)

            totals = OrderTotals(
                subtotal=subtotal,
                predicted_shipping=predicted_shipping,
                vat_rate=treatment.vat_rate,
                vat_amount=treatment.vat_amount,
                vat_exempt_reason=treatment.vat_exempt_reason,
                total=subtotal + predicted_shipping + treatment.vat_amount,
            )

            quote = Quote(
                company_id=company.company_id,
                destination_country=destination,
                tax_zone=treatment.tax_zone,
                lines=order_lines,
                totals=totals,
                currency=self.settings.currency,
                validation_errors=validation_errors,
            )

            quote.add_trace("Company", f"{company.name or company.company_id} ({company.type.value})", company.company_id)
            quote.add_trace("Subtotal", f"{len(order_lines)} line(s)", f"£{subtotal}")
            if free_shipping:
                quote.add_trace("Shipping", "Free shipping override", "£0")
            elif ship:
                quote.add_trace("Shipping", f"Predicted shipping to {destination}", f"£{predicted_shipping}")
                if self._shipping_missed(destination, subtotal):
                    quote.add_warning(f"No shipping rate for {destination}, default shipping applied")
            quote.add_trace("Tax Zone", f"Destination {destination}", treatment.tax_zone.value)
            quote.add_trace("VAT", f"{treatment.vat_rate * 100:.0f}% on £{taxable_amount}", f"£{treatment.vat_amount}")
            if treatment.vat_exempt_reason:
                quote.add_trace("VAT Exemption", treatment.vat_exempt_reason)
            quote.add_trace("Total", "Subtotal + shipping + VAT", f"£{totals.total}")

            for line in order_lines:
                for warning in line.warnings:
                    quote.add_warning(warning)

            logger.info(
                "Order priced",
                lines=len(order_lines),
                subtotal=subtotal,
                shipping=predicted_shipping,
                vat_amount=treatment.vat_amount,
                vat_exempt_reason=treatment.vat_exempt_reason,
                total=totals.total,
            )
        return quote

    def confirm_shipping(self, quote: Quote, confirmed_shipping: Decimal) -> Quote:
        """
        Replace predicted shipping with the figure confirmed at approval.

        The quote's VAT treatment (rate and exemption reason) is kept; the
        VAT amount and total are recomputed on the new taxable amount.
        Returns a new Quote; the original is left untouched.
        """
        confirmed_shipping = Decimal(confirmed_shipping)
        if not confirmed_shipping.is_finite() or confirmed_shipping < 0:
            raise InvalidAmount(f"Confirmed shipping must be non-negative, got {confirmed_shipping}")

        old = quote.totals
        vat_amount = quantize_money((old.subtotal + confirmed_shipping) * old.vat_rate)
        totals = replace(
            old,
            predicted_shipping=confirmed_shipping,
            vat_amount=vat_amount,
            total=old.subtotal + confirmed_shipping + vat_amount,
        )

        confirmed = replace(
            quote, totals=totals, lines=list(quote.lines), warnings=list(quote.warnings),
            validation_errors=list(quote.validation_errors),
            trace=list(quote.trace),
        )
        confirmed.add_trace(
            "Shipping Confirmed",
            f"£{old.predicted_shipping} → £{confirmed_shipping}",
            f"£{totals.total}",
        )

        logger.info(
            "Shipping confirmed",
            company_id=quote.company_id,
            predicted=old.predicted_shipping,
            confirmed=confirmed_shipping,
            total=totals.total,
        )
        return confirmed

    @staticmethod
    def _cart_line(line) -> CartLine:
        if isinstance(line, CartLine):
            return line
        product_code, quantity = line
        return CartLine(product_code=product_code, quantity=quantity)

    def _validate_lines(self, lines: list[CartLine]):
        for line in lines:
            if isinstance(line.quantity, bool) or not isinstance(line.quantity, int):
                raise InvalidLineItem(line.product_code, line.quantity, "quantity must be a whole number")
            if line.quantity <= 0:
                raise InvalidLineItem(line.product_code, line.quantity, "quantity must be greater than zero")
            if self.store.get_product(str(line.product_code).strip()) is None:
                raise InvalidLineItem(line.product_code, line.quantity, "unknown product code")

    def _price_line(self, company: Company, line: CartLine) -> OrderLine:
        """Calculate a single line with trace."""
        resolution = self.prices.resolve_unit_price(company.company_id, company.type, line.product_code)
        product = self.store.get_product(resolution.product_code)

        order_line = OrderLine(
            product_code=resolution.product_code,
            quantity=line.quantity,
            unit_price=resolution.unit_price,
            price_source=resolution.price_source,
            line_total=resolution.unit_price * line.quantity,
            description=product.description if product else "",
            warnings=list(resolution.warnings),
            trace=list(resolution.trace),
        )
        return order_line

    def _shipping_missed(self, destination: str, subtotal: Decimal) -> bool:
        """Whether the rate table had no row for this destination and subtotal."""
        find_rate = getattr(self.shipping, "find_rate", None)
        if find_rate is not None:
            return find_rate(destination, subtotal) is None
        has_rate = getattr(self.shipping, "has_rate", None)
        return has_rate is not None and not has_rate(destination)
