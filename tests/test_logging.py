from decimal import Decimal

import structlog

from trade_pricing.config.logging import decimals_as_strings, quote_context


def test_decimals_rendered_as_exact_strings():
    event = decimals_as_strings(None, "info", {"event": "Order priced", "total": Decimal("113.40"), "lines": 2})
    assert event == {"event": "Order priced", "total": "113.40", "lines": 2}


def test_quote_context_binds_company_and_destination():
    structlog.contextvars.clear_contextvars()
    with quote_context("DIST-1", "DE"):
        assert structlog.contextvars.get_contextvars() == {"company_id": "DIST-1", "destination": "DE"}
    assert structlog.contextvars.get_contextvars() == {}


def test_calculation_logs_inside_quote_context(calculator, companies):
    structlog.contextvars.clear_contextvars()
    seen = []

    original = calculator.vat.resolve

    def resolve(*args, **kwargs):
        seen.append(structlog.contextvars.get_contextvars())
        return original(*args, **kwargs)

    calculator.vat.resolve = resolve
    calculator.calculate(companies['DIST-1'], [('TRI-CREASER', 1)], 'de')

    assert seen == [{"company_id": "DIST-1", "destination": "DE"}]
    assert structlog.contextvars.get_contextvars() == {}
