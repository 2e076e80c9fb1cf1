"""
Country Tax Rules - Classifies a destination into DOMESTIC, EU or ROW.
"""
from typing import Iterable, Mapping, Optional

from ..config.settings import COUNTRY_ALIASES, EU_MEMBER_STATES, Settings
from .models import TaxZone


class CountryTaxRules:
    """
    Static classification of country codes for VAT purposes.

    Precedence:
    1. Home jurisdiction (and its aliases) → DOMESTIC
    2. EU member state → EU
    3. Anything else, unrecognised codes included → ROW
    """

    def __init__(
        self,
        home_country: str = 'GB',
        eu_countries: Iterable[str] = EU_MEMBER_STATES,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        self.home_country = home_country.strip().upper()
        self.aliases = {k.upper(): v.upper() for k, v in (aliases if aliases is not None else COUNTRY_ALIASES).items()}
        self.eu_countries = frozenset(code.upper() for code in eu_countries)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'CountryTaxRules':
        return cls(
            home_country=settings.home_country,
            eu_countries=settings.eu_countries,
            aliases=settings.country_aliases,
        )

    def normalize(self, country_code: Optional[str]) -> str:
        """Canonical upper-case code; blank means the home country."""
        code = (country_code or '').strip().upper()
        if not code:
            return self.home_country
        return self.aliases.get(code, code)

    def classify(self, country_code: Optional[str]) -> TaxZone:
        code = self.normalize(country_code)

        # Domestic check wins even if the home country were ever listed as EU
        if code == self.home_country:
            return TaxZone.DOMESTIC

        if code in self.eu_countries:
            return TaxZone.EU

        return TaxZone.ROW
