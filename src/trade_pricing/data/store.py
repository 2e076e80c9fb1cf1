"""
Pricing Store - Read-only lookups for companies, products and price overrides.

The pricing core only depends on the ``PricingStore`` protocol. Two
implementations ship with the package:
- InMemoryPricingStore: built from model objects (tests, embedding)
- CsvPricingStore: loads back-office CSV exports with pandas
"""
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, Optional, Protocol

import pandas as pd

from ..config.logging import get_logger
from ..config.settings import Settings, get_settings
from ..engine.models import Company, CompanyType, LadderBand, PricingTier, Product, ProductType, ShippingRate

logger = get_logger(__name__)

COMPANY_TYPES = {t.value for t in CompanyType}
PRODUCT_TYPES = {t.value for t in ProductType}
PRICING_TIERS = {t.value for t in PricingTier}


class PricingStore(Protocol):
    """Lookups the pricing core needs. Each returns None when not found."""

    def get_company(self, company_id: str) -> Optional[Company]: ...

    def get_product(self, product_code: str) -> Optional[Product]: ...

    def get_distributor_price(self, product_code: str) -> Optional[Decimal]: ...

    def get_company_custom_price(self, company_id: str, product_code: str) -> Optional[Decimal]: ...


class InMemoryPricingStore:
    """Dictionary-backed store."""

    def __init__(
        self,
        companies: Iterable[Company] = (),
        products: Iterable[Product] = (),
        distributor_prices: Optional[dict[str, Decimal]] = None,
        custom_prices: Optional[dict[tuple[str, str], Decimal]] = None,
    ):
        self.companies = {c.company_id: c for c in companies}
        self.products = {p.product_code: p for p in products}
        self.distributor_prices = dict(distributor_prices or {})
        self.custom_prices = dict(custom_prices or {})

        for code, price in self.distributor_prices.items():
            if price < 0:
                raise ValueError(f"Distributor price for {code} must be non-negative")
        for (company_id, code), price in self.custom_prices.items():
            if price < 0:
                raise ValueError(f"Custom price for {company_id}/{code} must be non-negative")

    def get_company(self, company_id: str) -> Optional[Company]:
        return self.companies.get(str(company_id).strip())

    def get_product(self, product_code: str) -> Optional[Product]:
        return self.products.get(str(product_code).strip())

    def get_distributor_price(self, product_code: str) -> Optional[Decimal]:
        return self.distributor_prices.get(str(product_code).strip())

    def get_company_custom_price(self, company_id: str, product_code: str) -> Optional[Decimal]:
        return self.custom_prices.get((str(company_id).strip(), str(product_code).strip()))

    def set_company_custom_price(self, company_id: str, product_code: str, price: Optional[Decimal]):
        """Set or clear (price=None) a negotiated price."""
        key = (str(company_id).strip(), str(product_code).strip())
        if price is None:
            self.custom_prices.pop(key, None)
        elif Decimal(price) < 0:
            raise ValueError(f"Custom price for {key[0]}/{key[1]} must be non-negative")
        else:
            self.custom_prices[key] = Decimal(price)


def _parse_decimal(value: str) -> Optional[Decimal]:
    value = str(value).strip().replace('£', '').replace(',', '')
    if not value:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _parse_bool(value: str, default: bool = True) -> bool:
    value = str(value).strip().lower()
    if not value:
        return default
    return value in ('true', '1', 'yes', 'on')


def _load_csv(path: Path) -> pd.DataFrame:
    """Read a CSV as strings with stripped headers and cells."""
    if not path.exists():
        logger.warning("Pricing data file not found", path=str(path))
        return pd.DataFrame()
    df = pd.read_csv(path, dtype=str).fillna('')
    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def _parse_int(value: str) -> Optional[int]:
    number = _parse_decimal(value)
    if number is None or number != number.to_integral_value():
        return None
    return int(number)


def _active_rows(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty or 'active' not in df.columns:
        return df
    return df[df['active'].map(_parse_bool)]


def _negative(df: pd.DataFrame, column: str) -> pd.Series:
    """Mask of rows whose price column parses to a negative amount."""
    if df.empty or column not in df.columns:
        return pd.Series(False, index=df.index, dtype=bool)
    return df[column].map(lambda v: (_parse_decimal(v) or 0) < 0).astype(bool)


def _drop_negative(df: pd.DataFrame, column: str, table: str) -> pd.DataFrame:
    """Drop negative price rows so resolution falls through to the next level."""
    negative = _negative(df, column)
    for key, row in df[negative].iterrows():
        logger.warning("Negative price row ignored", table=table, key=str(key), price=row[column])
    return df[~negative]


class CsvPricingStore:
    """
    Store backed by CSV exports of the back-office tables.

    Files (see Settings):
    - companies.csv: company_id, company_name, type, vat_number, billing_country, ...
    - products.csv: product_code, description, base_price, active, category, type
    - distributor_prices.csv: product_code, standard_price[, active]
    - company_prices.csv: company_id, product_code, custom_price
    - shipping_rates.csv: country_code, rate_gbp, free_shipping_threshold, min_order_value, zone_name, active
    - standard_pricing_ladder.csv: min_qty, max_qty, unit_price[, active]
    - premium_pricing_ladder.csv, tool_discounts.csv: min_qty, max_qty, discount_pct[, active]

    Duplicate keys keep the first row. Negative distributor and custom prices
    are dropped and a negative base price is treated as unset, each with a
    warning.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

        if not self.settings.products_csv.exists():
            raise FileNotFoundError(
                f"products.csv not found at {self.settings.products_csv}. "
                "Export the product catalog first."
            )

        self.companies = self._index(_load_csv(self.settings.companies_csv), 'company_id')
        self.products = self._index(_load_csv(self.settings.products_csv), 'product_code')
        negative = _negative(self.products, 'base_price')
        if negative.any():
            for code in self.products.index[negative]:
                logger.warning("Negative base price treated as unset", product_code=code,
                               base_price=self.products.at[code, 'base_price'])
            self.products.loc[negative, 'base_price'] = ''

        self.distributor_prices = _drop_negative(
            self._index(_active_rows(_load_csv(self.settings.distributor_prices_csv)), 'product_code'),
            'standard_price', 'distributor_prices',
        )
        self.company_prices = _drop_negative(
            self._index(_active_rows(_load_csv(self.settings.company_prices_csv)), ['company_id', 'product_code']),
            'custom_price', 'company_prices',
        )
        self.shipping_table = _load_csv(self.settings.shipping_rates_csv)
        self.ladder_tables = {
            'standard': _load_csv(self.settings.standard_ladder_csv),
            'premium': _load_csv(self.settings.premium_ladder_csv),
            'tool': _load_csv(self.settings.tool_discounts_csv),
        }

        logger.info(
            "Pricing data loaded",
            companies=len(self.companies),
            products=len(self.products),
            distributor_prices=len(self.distributor_prices),
            company_prices=len(self.company_prices),
            shipping_rates=len(self.shipping_table),
        )

    @staticmethod
    def _index(df: pd.DataFrame, key) -> pd.DataFrame:
        if df.empty:
            return df
        keys = key if isinstance(key, list) else [key]
        missing = [k for k in keys if k not in df.columns]
        if missing:
            raise ValueError(f"Pricing data is missing columns: {', '.join(missing)}")
        df = df[(df[keys] != '').all(axis=1)]
        df = df.drop_duplicates(keys, keep='first')
        return df.set_index(key)

    def reload_data(self):
        """Reload all CSV data from disk."""
        self.__init__(self.settings)

    def _row(self, df: pd.DataFrame, key) -> Optional[pd.Series]:
        if df.empty or key not in df.index:
            return None
        return df.loc[key]

    def get_company(self, company_id: str) -> Optional[Company]:
        row = self._row(self.companies, str(company_id).strip())
        if row is None:
            return None
        company_type = row.get('type', '').lower()
        if company_type not in COMPANY_TYPES:
            logger.warning("Unknown company type, treating as customer", company_id=company_id, type=company_type)
            company_type = CompanyType.CUSTOMER.value
        return Company(
            company_id=str(company_id).strip(),
            name=row.get('company_name', ''),
            type=CompanyType(company_type),
            vat_number=row.get('vat_number') or None,
            billing_country=row.get('billing_country') or None,
            address_line_1=row.get('billing_address_line_1') or None,
            address_line_2=row.get('billing_address_line_2') or None,
            city=row.get('billing_city') or None,
            postal_code=row.get('billing_postal_code') or None,
        )

    def get_product(self, product_code: str) -> Optional[Product]:
        row = self._row(self.products, str(product_code).strip())
        if row is None:
            return None
        product_type = row.get('type', '').lower()
        pricing_tier = row.get('pricing_tier', '').lower()
        return Product(
            product_code=str(product_code).strip(),
            base_price=_parse_decimal(row.get('base_price', '')),
            active=_parse_bool(row.get('active', '')),
            category=row.get('category') or None,
            type=ProductType(product_type) if product_type in PRODUCT_TYPES else ProductType.OTHER,
            description=row.get('description', ''),
            pricing_tier=PricingTier(pricing_tier) if pricing_tier in PRICING_TIERS else None,
        )

    def get_distributor_price(self, product_code: str) -> Optional[Decimal]:
        row = self._row(self.distributor_prices, str(product_code).strip())
        if row is None:
            return None
        return _parse_decimal(row.get('standard_price', ''))

    def get_company_custom_price(self, company_id: str, product_code: str) -> Optional[Decimal]:
        row = self._row(self.company_prices, (str(company_id).strip(), str(product_code).strip()))
        if row is None:
            return None
        return _parse_decimal(row.get('custom_price', ''))

    def shipping_rates(self) -> list[ShippingRate]:
        """Shipping rate table rows (inactive rows included, flagged)."""
        rates = []
        for _, row in self.shipping_table.iterrows():
            rate = _parse_decimal(row.get('rate_gbp', ''))
            if not row.get('country_code') or rate is None:
                continue
            rates.append(ShippingRate(
                country_code=row['country_code'],
                rate=rate,
                free_shipping_threshold=_parse_decimal(row.get('free_shipping_threshold', '')),
                min_order_value=_parse_decimal(row.get('min_order_value', '')) or Decimal("0"),
                zone_name=row.get('zone_name') or None,
                active=_parse_bool(row.get('active', '')),
            ))
        return rates

    def _ladder(self, name: str, value_column: str) -> list[LadderBand]:
        bands = []
        for _, row in self.ladder_tables[name].iterrows():
            min_qty = _parse_int(row.get('min_qty', ''))
            max_qty = _parse_int(row.get('max_qty', ''))
            value = _parse_decimal(row.get(value_column, ''))
            if min_qty is None or max_qty is None or value is None:
                logger.warning("Unreadable ladder row skipped", ladder=name, row=row.to_dict())
                continue
            bands.append(LadderBand(min_qty, max_qty, value, active=_parse_bool(row.get('active', ''))))
        return bands

    def standard_ladder(self) -> list[LadderBand]:
        """Standard consumable ladder: one unit price per combined-quantity band."""
        return self._ladder('standard', 'unit_price')

    def premium_ladder(self) -> list[LadderBand]:
        return self._ladder('premium', 'discount_pct')

    def tool_discounts(self) -> list[LadderBand]:
        return self._ladder('tool', 'discount_pct')
