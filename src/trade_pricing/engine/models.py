"""
Data models for the pricing core.

Uses dataclasses for structured, type-safe data representation.
Reference data (companies, products, prices) and computed totals are frozen;
order lines and quotes collect trace steps while they are being built.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class CompanyType(str, Enum):
    CUSTOMER = "customer"
    DISTRIBUTOR = "distributor"
    PARTNER = "partner"


class ProductType(str, Enum):
    TOOL = "tool"
    CONSUMABLE = "consumable"
    OTHER = "other"


class PriceSource(str, Enum):
    """Which override level produced a resolved unit price."""
    CUSTOM = "CUSTOM"
    STANDARD = "STANDARD"
    BASE = "BASE"


class TaxZone(str, Enum):
    DOMESTIC = "DOMESTIC"
    EU = "EU"
    ROW = "ROW"


class PricingTier(str, Enum):
    """Volume ladder a consumable is sold on."""
    STANDARD = "standard"
    PREMIUM = "premium"


# Company types entitled to distributor standard pricing
TRADE_COMPANY_TYPES = frozenset({CompanyType.DISTRIBUTOR, CompanyType.PARTNER})


@dataclass(frozen=True)
class Company:
    """A company participating in trade."""
    company_id: str
    name: str
    type: CompanyType
    vat_number: Optional[str] = None
    billing_country: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None


@dataclass(frozen=True)
class Product:
    """A sellable SKU from the catalog."""
    product_code: str
    base_price: Optional[Decimal] = None
    active: bool = True
    category: Optional[str] = None
    type: ProductType = ProductType.OTHER
    description: str = ""
    pricing_tier: Optional[PricingTier] = None

    def __post_init__(self):
        if self.base_price is not None and self.base_price < 0:
            raise ValueError(f"Base price for {self.product_code} must be non-negative")


@dataclass(frozen=True)
class ShippingRate:
    """A row of the shipping rate table."""
    country_code: str
    rate: Decimal
    free_shipping_threshold: Optional[Decimal] = None
    min_order_value: Decimal = Decimal("0")
    zone_name: Optional[str] = None
    active: bool = True


@dataclass(frozen=True)
class LadderBand:
    """
    A quantity band of a volume ladder, inclusive at both ends.

    ``value`` is a unit price on the standard ladder and a percentage off
    on the premium ladder and the tool discount bands.
    """
    min_qty: int
    max_qty: int
    value: Decimal
    active: bool = True


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class CartLine:
    """A requested (product_code, quantity) pair."""
    product_code: str
    quantity: int


@dataclass
class QuoteRequest:
    """A pricing request for a company and a cart."""
    company_id: str
    lines: list[CartLine]
    shipping_country: str
    free_shipping: bool = False  # sales-rep override


@dataclass
class PriceResolution:
    """Resolved unit price with its provenance."""
    product_code: str
    unit_price: Decimal
    price_source: PriceSource
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        self.trace.append(TraceStep(step=step, description=description, value=value))


@dataclass(frozen=True)
class VatTreatment:
    """VAT decision for a taxable amount and destination."""
    vat_amount: Decimal
    vat_rate: Decimal
    vat_exempt_reason: Optional[str]
    tax_zone: TaxZone


@dataclass
class OrderLine:
    """A single priced line of an order or quote."""
    product_code: str
    quantity: int
    unit_price: Decimal
    price_source: PriceSource
    line_total: Decimal
    description: str = ""
    discount_applied: Optional[str] = None  # volume pricing note
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a warning for this line."""
        self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass(frozen=True)
class OrderTotals:
    """Money totals of a priced order. Immutable once computed."""
    subtotal: Decimal
    predicted_shipping: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    vat_exempt_reason: Optional[str]
    total: Decimal

    @property
    def taxable_amount(self) -> Decimal:
        return self.subtotal + self.predicted_shipping


@dataclass
class Quote:
    """Complete result of a pricing calculation."""
    company_id: str
    destination_country: str
    tax_zone: TaxZone
    lines: list[OrderLine]
    totals: OrderTotals
    currency: str = "GBP"
    warnings: list[str] = field(default_factory=list)
    validation_errors: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the quote-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a quote-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable quote trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_record(self) -> dict:
        """Convert to a plain dict for the order/quote persistence flow."""
        totals = self.totals
        return {
            "company_id": self.company_id,
            "destination_country": self.destination_country,
            "tax_zone": self.tax_zone.value,
            "currency": self.currency,
            "subtotal": str(totals.subtotal),
            "predicted_shipping": str(totals.predicted_shipping),
            "vat_rate": str(totals.vat_rate),
            "vat_amount": str(totals.vat_amount),
            "vat_exempt_reason": totals.vat_exempt_reason,
            "total": str(totals.total),
            "lines": [
                {
                    "product_code": line.product_code,
                    "description": line.description,
                    "quantity": line.quantity,
                    "unit_price": str(line.unit_price),
                    "price_source": line.price_source.value,
                    "line_total": str(line.line_total),
                    "discount_applied": line.discount_applied,
                    "warnings": list(line.warnings),
                }
                for line in self.lines
            ],
            "warnings": list(self.warnings),
            "validation_errors": list(self.validation_errors),
        }
