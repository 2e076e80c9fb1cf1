"""Engine subpackage - core pricing and VAT resolution."""
from .pricing_engine import OrderTotalCalculator
from .price_resolver import PriceResolver
from .vat_resolver import VATResolver
from .shipping import ShippingEstimator
from .country_rules import CountryTaxRules
from .volume_pricing import VolumePricing
from .errors import PricingError, InvalidLineItem, MissingCompany, InvalidAmount
from .models import (
    CartLine,
    Company,
    CompanyType,
    LadderBand,
    OrderLine,
    OrderTotals,
    PriceSource,
    PricingTier,
    Product,
    ProductType,
    Quote,
    QuoteRequest,
    ShippingRate,
    TaxZone,
)

__all__ = [
    'OrderTotalCalculator', 'PriceResolver', 'VATResolver', 'ShippingEstimator', 'CountryTaxRules',
    'VolumePricing',
    'PricingError', 'InvalidLineItem', 'MissingCompany', 'InvalidAmount',
    'CartLine', 'Company', 'CompanyType', 'LadderBand', 'OrderLine', 'OrderTotals',
    'PriceSource', 'PricingTier',
    'Product', 'ProductType', 'Quote', 'QuoteRequest', 'ShippingRate', 'TaxZone',
]
