"""Shared fixtures: a small in-memory catalog, price lists and rate table."""
import os
import sys
from decimal import Decimal

import pytest

# Add src to path for checkouts without an editable install
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from trade_pricing.config.settings import Settings
from trade_pricing.data.store import InMemoryPricingStore
from trade_pricing.engine import (
    Company,
    CompanyType,
    LadderBand,
    OrderTotalCalculator,
    PricingTier,
    Product,
    ProductType,
    ShippingEstimator,
    ShippingRate,
    VolumePricing,
)


@pytest.fixture
def settings(tmp_path):
    return Settings.load(tmp_path)


@pytest.fixture
def companies():
    return {
        'DIST-1': Company('DIST-1', 'Druckweiter GmbH', CompanyType.DISTRIBUTOR, vat_number='DE123456789', billing_country='DE'),
        'DIST-2': Company('DIST-2', 'Finition Rapide SARL', CompanyType.DISTRIBUTOR, vat_number=None, billing_country='FR'),
        'PART-1': Company('PART-1', 'PrintFinish Partners', CompanyType.PARTNER, vat_number='GB987654321', billing_country='GB'),
        'CUST-1': Company('CUST-1', 'Northern Print Co', CompanyType.CUSTOMER, billing_country='GB'),
        'CUST-2': Company('CUST-2', 'Bindery Supply Inc', CompanyType.CUSTOMER, billing_country='US'),
    }


@pytest.fixture
def store(companies):
    return InMemoryPricingStore(
        companies=companies.values(),
        products=[
            Product('TRI-CREASER', Decimal('395.00'), type=ProductType.TOOL, description='Tri-Creaser Fast-Fit'),
            Product('QUAD-CREASER', Decimal('595.00'), type=ProductType.TOOL, description='Quad-Creaser'),
            Product('CREASE-RUBBER', Decimal('42.50'), type=ProductType.CONSUMABLE, description='Creasing Rubber'),
            Product('SECTION-SCORE', None, type=ProductType.TOOL, description='Section Scoring Kit'),
            Product('MULTI-TOOL-OLD', Decimal('310.00'), active=False, description='Multi-Tool Cutter'),
            Product('BLADE-SEAL', Decimal('33.00'), type=ProductType.CONSUMABLE, pricing_tier=PricingTier.STANDARD),
            Product('GRIPPER-BAND', Decimal('33.00'), type=ProductType.CONSUMABLE, pricing_tier=PricingTier.STANDARD),
            Product('NYLON-SLEEVE', Decimal('33.00'), type=ProductType.CONSUMABLE, pricing_tier=PricingTier.STANDARD),
            Product('CUTTING-KNIFE', Decimal('58.00'), type=ProductType.CONSUMABLE, pricing_tier=PricingTier.PREMIUM),
        ],
        distributor_prices={
            'TRI-CREASER': Decimal('237.00'),
            'QUAD-CREASER': Decimal('357.00'),
            'CREASE-RUBBER': Decimal('25.50'),
            'BLADE-SEAL': Decimal('19.00'),
        },
        custom_prices={
            ('DIST-1', 'TRI-CREASER'): Decimal('215.00'),
            ('CUST-1', 'QUAD-CREASER'): Decimal('550.00'),
            ('CUST-1', 'NYLON-SLEEVE'): Decimal('30.00'),
        },
    )


@pytest.fixture
def shipping_rates():
    return [
        ShippingRate('GB', Decimal('9.50'), free_shipping_threshold=Decimal('500')),
        ShippingRate('DE', Decimal('18.00'), free_shipping_threshold=Decimal('750')),
        ShippingRate('US', Decimal('35.00')),
        ShippingRate('US', Decimal('25.00'), min_order_value=Decimal('1000')),
        ShippingRate('AU', Decimal('42.00'), active=False),
    ]


@pytest.fixture
def calculator(store, shipping_rates, settings):
    return OrderTotalCalculator(store, shipping=ShippingEstimator(shipping_rates), settings=settings)


@pytest.fixture
def volume_pricing():
    return VolumePricing(
        standard_ladder=[
            LadderBand(1, 3, Decimal('33.00')),
            LadderBand(4, 7, Decimal('29.00')),
            LadderBand(8, 9, Decimal('27.00')),
            LadderBand(10, 19, Decimal('25.00')),
        ],
        premium_ladder=[
            LadderBand(1, 2, Decimal('0')),
            LadderBand(3, 4, Decimal('7')),
            LadderBand(5, 9, Decimal('15')),
            LadderBand(10, 10, Decimal('25')),
        ],
        tool_discounts=[
            LadderBand(1, 1, Decimal('0')),
            LadderBand(2, 2, Decimal('10')),
            LadderBand(3, 3, Decimal('20')),
            LadderBand(4, 4, Decimal('30')),
            LadderBand(5, 5, Decimal('40')),
        ],
    )


@pytest.fixture
def volume_calculator(store, shipping_rates, settings, volume_pricing):
    return OrderTotalCalculator(
        store, shipping=ShippingEstimator(shipping_rates), settings=settings, volume=volume_pricing
    )
