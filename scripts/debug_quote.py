#!/usr/bin/env python
"""
Price a cart against the CSV exports and print the full trace.

Usage:
    python scripts/debug_quote.py DIST-0001 DE TRI-CREASER=2 CREASE-RUBBER-35=10
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from trade_pricing.api.state import get_calculator
from trade_pricing.config.logging import configure_logging
from trade_pricing.engine import CartLine, PricingError, QuoteRequest


def parse_items(args: list[str]) -> list[CartLine]:
    lines = []
    for arg in args:
        code, _, qty = arg.partition('=')
        lines.append(CartLine(product_code=code, quantity=int(qty or 1)))
    return lines


def debug():
    if len(sys.argv) < 4:
        print(__doc__)
        sys.exit(2)

    company_id, country = sys.argv[1], sys.argv[2]
    configure_logging(log_level='DEBUG')
    calculator = get_calculator()

    request = QuoteRequest(company_id=company_id, lines=parse_items(sys.argv[3:]), shipping_country=country)
    try:
        quote = calculator.quote(request)
    except PricingError as e:
        print(f"\n❌ {e.message}")
        sys.exit(1)

    print("\n--- Lines ---")
    for line in quote.lines:
        print(f"{line.product_code} x{line.quantity} @ £{line.unit_price} [{line.price_source.value}] = £{line.line_total}")
        print(line.get_trace_text())

    print("\n--- Quote ---")
    print(quote.get_trace_text())

    if quote.validation_errors:
        print("\nValidation errors:")
        for error in quote.validation_errors:
            print(f"  ✗ {error}")

    if quote.warnings:
        print("\nWarnings:")
        for warning in quote.warnings:
            print(f"  ⚠ {warning}")


if __name__ == "__main__":
    debug()
