import pytest

from trade_pricing.engine import CountryTaxRules, TaxZone


@pytest.fixture(scope="module")
def rules():
    return CountryTaxRules()


@pytest.mark.parametrize("code", ["GB", "gb", " GB ", "UK", "uk"])
def test_home_country_and_alias_are_domestic(rules, code):
    assert rules.classify(code) == TaxZone.DOMESTIC


@pytest.mark.parametrize("code", ["", None, "   "])
def test_blank_country_defaults_to_home(rules, code):
    assert rules.normalize(code) == "GB"
    assert rules.classify(code) == TaxZone.DOMESTIC


@pytest.mark.parametrize("code", ["DE", "FR", "ie", "ES", "SE", "HR", "GR"])
def test_member_states_are_eu(rules, code):
    assert rules.classify(code) == TaxZone.EU


def test_greek_vat_prefix_maps_to_greece(rules):
    assert rules.normalize("EL") == "GR"
    assert rules.classify("EL") == TaxZone.EU


@pytest.mark.parametrize("code", ["US", "CH", "NO", "AU", "ZZ"])
def test_everything_else_is_rest_of_world(rules, code):
    assert rules.classify(code) == TaxZone.ROW


def test_domestic_check_takes_priority_over_eu_membership():
    rules = CountryTaxRules(home_country="GB", eu_countries={"GB", "DE"})
    assert rules.classify("GB") == TaxZone.DOMESTIC
    assert rules.classify("DE") == TaxZone.EU


def test_rules_follow_settings(settings):
    settings.home_country = "IE"
    rules = CountryTaxRules.from_settings(settings)
    assert rules.classify("IE") == TaxZone.DOMESTIC
    assert rules.classify("GB") == TaxZone.ROW
