"""
VAT Resolver - The single implementation of the UK VAT decision.

Given a taxable amount (subtotal + shipping), a destination country and an
optional VAT registration number, decides rate, amount and exemption reason.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..config.logging import get_logger
from .country_rules import CountryTaxRules
from .errors import InvalidAmount
from .models import TaxZone, VatTreatment

logger = get_logger(__name__)

MONEY_QUANT = Decimal("0.01")

REVERSE_CHARGE = "EU Reverse Charge"
EXPORT = "Export"


def quantize_money(value: Decimal) -> Decimal:
    """Round to the currency minor unit (pence)."""
    return Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def has_vat_number(vat_number: Optional[str]) -> bool:
    """Presence check only; format and checksum are not validated."""
    return bool(vat_number and vat_number.strip())


class VATResolver:
    """
    Resolves VAT treatment. First match wins:

    1. DOMESTIC → standard rate
    2. EU with VAT number → 0%, EU Reverse Charge
    3. EU without VAT number → standard rate (reverse charge forfeited)
    4. ROW → 0%, Export
    """

    def __init__(self, rules: Optional[CountryTaxRules] = None, standard_rate: Decimal = Decimal("0.20")):
        self.rules = rules or CountryTaxRules()
        self.standard_rate = Decimal(standard_rate)

    def resolve(self, taxable_amount: Decimal, country_code: Optional[str], vat_number: Optional[str]) -> VatTreatment:
        taxable_amount = Decimal(taxable_amount)
        if not taxable_amount.is_finite() or taxable_amount < 0:
            raise InvalidAmount(f"Taxable amount must be a non-negative number, got {taxable_amount}")

        zone = self.rules.classify(country_code)

        if zone == TaxZone.DOMESTIC:
            treatment = self._standard(taxable_amount, zone)
        elif zone == TaxZone.EU:
            if has_vat_number(vat_number):
                treatment = VatTreatment(
                    vat_amount=Decimal("0.00"),
                    vat_rate=Decimal("0"),
                    vat_exempt_reason=REVERSE_CHARGE,
                    tax_zone=zone,
                )
            else:
                treatment = self._standard(taxable_amount, zone)
        else:
            treatment = VatTreatment(
                vat_amount=Decimal("0.00"),
                vat_rate=Decimal("0"),
                vat_exempt_reason=EXPORT,
                tax_zone=zone,
            )

        logger.debug(
            "VAT resolved",
            country=self.rules.normalize(country_code),
            zone=zone.value,
            taxable_amount=str(taxable_amount),
            vat_rate=str(treatment.vat_rate),
            vat_amount=str(treatment.vat_amount),
            vat_exempt_reason=treatment.vat_exempt_reason,
        )
        return treatment

    def _standard(self, taxable_amount: Decimal, zone: TaxZone) -> VatTreatment:
        return VatTreatment(
            vat_amount=quantize_money(taxable_amount * self.standard_rate),
            vat_rate=self.standard_rate,
            vat_exempt_reason=None,
            tax_zone=zone,
        )
