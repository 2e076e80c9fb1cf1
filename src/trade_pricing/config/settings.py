"""
Centralized settings and path configuration for the pricing core.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


# EU member states (ISO-3166 alpha-2). GB is handled as the home jurisdiction.
EU_MEMBER_STATES = frozenset({
    'AT', 'BE', 'BG', 'HR', 'CY', 'CZ', 'DK', 'EE', 'FI', 'FR', 'DE', 'GR', 'HU', 'IE',
    'IT', 'LV', 'LT', 'LU', 'MT', 'NL', 'PL', 'PT', 'RO', 'SK', 'SI', 'ES', 'SE',
})

# Legacy/alternate codes seen in company and address records
COUNTRY_ALIASES = {
    'UK': 'GB',
    'EL': 'GR',  # Greek VAT prefix
}


def get_project_root() -> Path:
    """Get the project root directory (where the data folder lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'data' / 'products.csv').exists() or (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('true', '1', 'yes', 'on')


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Pricing data files
    companies_csv: Path
    products_csv: Path
    distributor_prices_csv: Path
    company_prices_csv: Path
    shipping_rates_csv: Path
    standard_ladder_csv: Path
    premium_ladder_csv: Path
    tool_discounts_csv: Path

    # Tax jurisdiction
    home_country: str = 'GB'
    country_aliases: dict[str, str] = field(default_factory=lambda: dict(COUNTRY_ALIASES))
    eu_countries: frozenset = EU_MEMBER_STATES
    standard_vat_rate: Decimal = Decimal('0.20')

    # Money
    currency: str = 'GBP'
    default_shipping: Decimal = Decimal('0')

    # Volume pricing: maximum units per SKU on each ladder
    max_qty_standard: int = 15
    max_qty_premium: int = 10

    # Logging
    log_level: str = 'INFO'
    json_logs: bool = False

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        data_dir = Path(os.environ.get('TRADE_PRICING_DATA_DIR', root / 'data'))

        return cls(
            project_root=root,
            data_dir=data_dir,
            companies_csv=data_dir / 'companies.csv',
            products_csv=data_dir / 'products.csv',
            distributor_prices_csv=data_dir / 'distributor_prices.csv',
            company_prices_csv=data_dir / 'company_prices.csv',
            shipping_rates_csv=data_dir / 'shipping_rates.csv',
            standard_ladder_csv=data_dir / 'standard_pricing_ladder.csv',
            premium_ladder_csv=data_dir / 'premium_pricing_ladder.csv',
            tool_discounts_csv=data_dir / 'tool_discounts.csv',
            log_level=os.environ.get('TRADE_PRICING_LOG_LEVEL', 'INFO'),
            json_logs=_env_flag('TRADE_PRICING_JSON_LOGS'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
