"""
Price Resolver - Walks the price override hierarchy for a company and product.
"""
from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from ..config.logging import get_logger
from .errors import InvalidLineItem
from .models import TRADE_COMPANY_TYPES, CompanyType, PriceResolution, PriceSource

if TYPE_CHECKING:
    from ..data.store import PricingStore

logger = get_logger(__name__)


class PriceResolver:
    """
    Resolves the unit price for a (company, product) pair.

    Resolution order (first match wins):
    1. Company custom price → CUSTOM
    2. Distributor standard price, distributor/partner companies only → STANDARD
    3. Product base price, or 0 when the product has none → BASE
    """

    def __init__(self, store: PricingStore):
        self.store = store

    def resolve_unit_price(self, company_id: str, company_type: CompanyType, product_code: str) -> PriceResolution:
        company_id = str(company_id).strip()
        product_code = str(product_code).strip()
        company_type = CompanyType(company_type)

        product = self.store.get_product(product_code)
        if product is None:
            raise InvalidLineItem(product_code, reason="unknown product code")

        custom_price = self.store.get_company_custom_price(company_id, product_code)
        if custom_price is not None:
            resolution = PriceResolution(product_code, Decimal(custom_price), PriceSource.CUSTOM)
            resolution.add_trace("Custom Price", f"Negotiated price for company {company_id}", f"£{custom_price}")
        else:
            resolution = self._structural_price(company_id, company_type, product)

        if not product.active:
            resolution.warnings.append(f"Product {product_code} is inactive")

        logger.debug(
            "Unit price resolved",
            company_id=company_id,
            company_type=company_type.value,
            product_code=product_code,
            unit_price=str(resolution.unit_price),
            price_source=resolution.price_source.value,
        )
        return resolution

    def _structural_price(self, company_id: str, company_type: CompanyType, product) -> PriceResolution:
        """Distributor standard or base price, for companies without a custom price."""
        product_code = product.product_code
        resolution = PriceResolution(product_code, Decimal("0"), PriceSource.BASE)
        resolution.add_trace("Custom Price", f"No custom price for company {company_id}")

        if company_type in TRADE_COMPANY_TYPES:
            standard_price = self.store.get_distributor_price(product_code)
            if standard_price is not None:
                resolution.unit_price = Decimal(standard_price)
                resolution.price_source = PriceSource.STANDARD
                resolution.add_trace("Standard Price", f"Distributor standard price ({company_type.value})", f"£{standard_price}")
                return resolution

        if product.base_price is None:
            resolution.add_trace("Base Price", "No base price set, defaulting to zero", "£0")
            resolution.warnings.append(f"No price set for product {product_code}")
            return resolution

        resolution.unit_price = Decimal(product.base_price)
        resolution.add_trace("Base Price", "Using catalog base price", f"£{product.base_price}")
        return resolution
