from decimal import Decimal

import pytest

from trade_pricing.engine import CompanyType, InvalidLineItem, PriceResolver, PriceSource


@pytest.fixture
def resolver(store):
    return PriceResolver(store)


def test_custom_price_beats_distributor_standard(resolver):
    result = resolver.resolve_unit_price('DIST-1', CompanyType.DISTRIBUTOR, 'TRI-CREASER')
    assert result.unit_price == Decimal('215.00')
    assert result.price_source == PriceSource.CUSTOM


def test_distributor_without_custom_price_gets_standard(resolver):
    result = resolver.resolve_unit_price('DIST-2', CompanyType.DISTRIBUTOR, 'TRI-CREASER')
    assert result.unit_price == Decimal('237.00')
    assert result.price_source == PriceSource.STANDARD


def test_partner_gets_standard_price(resolver):
    result = resolver.resolve_unit_price('PART-1', CompanyType.PARTNER, 'QUAD-CREASER')
    assert result.unit_price == Decimal('357.00')
    assert result.price_source == PriceSource.STANDARD


def test_customer_never_gets_distributor_price(resolver):
    result = resolver.resolve_unit_price('CUST-2', CompanyType.CUSTOMER, 'TRI-CREASER')
    assert result.unit_price == Decimal('395.00'), "Distributor price leaked to a customer"
    assert result.price_source == PriceSource.BASE


def test_customer_custom_price_applies(resolver):
    result = resolver.resolve_unit_price('CUST-1', CompanyType.CUSTOMER, 'QUAD-CREASER')
    assert result.unit_price == Decimal('550.00')
    assert result.price_source == PriceSource.CUSTOM


def test_custom_price_is_company_specific(resolver):
    result = resolver.resolve_unit_price('DIST-2', CompanyType.DISTRIBUTOR, 'QUAD-CREASER')
    assert result.price_source == PriceSource.STANDARD


def test_distributor_falls_back_to_base_without_standard_price(resolver, store):
    store.distributor_prices.pop('CREASE-RUBBER')
    result = resolver.resolve_unit_price('DIST-2', CompanyType.DISTRIBUTOR, 'CREASE-RUBBER')
    assert result.unit_price == Decimal('42.50')
    assert result.price_source == PriceSource.BASE
    assert not result.warnings


def test_missing_base_price_defaults_to_zero_with_warning(resolver):
    result = resolver.resolve_unit_price('CUST-1', CompanyType.CUSTOMER, 'SECTION-SCORE')
    assert result.unit_price == Decimal('0')
    assert result.price_source == PriceSource.BASE
    assert any('No price set' in w for w in result.warnings)


def test_unknown_product_is_an_error_not_a_zero_price(resolver):
    with pytest.raises(InvalidLineItem) as exc:
        resolver.resolve_unit_price('CUST-1', CompanyType.CUSTOMER, 'DOES-NOT-EXIST')
    assert exc.value.product_code == 'DOES-NOT-EXIST'


def test_inactive_product_is_priced_with_warning(resolver):
    result = resolver.resolve_unit_price('CUST-1', CompanyType.CUSTOMER, 'MULTI-TOOL-OLD')
    assert result.unit_price == Decimal('310.00')
    assert any('inactive' in w for w in result.warnings)


def test_company_type_accepts_plain_string(resolver):
    result = resolver.resolve_unit_price('DIST-2', 'distributor', 'TRI-CREASER')
    assert result.price_source == PriceSource.STANDARD


def test_trace_records_each_level(resolver):
    result = resolver.resolve_unit_price('DIST-2', CompanyType.DISTRIBUTOR, 'TRI-CREASER')
    steps = [t.step for t in result.trace]
    assert steps == ['Custom Price', 'Standard Price']
