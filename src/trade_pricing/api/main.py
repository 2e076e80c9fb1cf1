from decimal import Decimal
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from trade_pricing import __version__
from trade_pricing.config.logging import configure_logging, get_logger
from trade_pricing.config.settings import get_settings
from trade_pricing.engine import (
    CartLine,
    InvalidAmount,
    InvalidLineItem,
    MissingCompany,
    OrderTotalCalculator,
    PricingError,
    QuoteRequest,
)
from trade_pricing.api.state import get_calculator, reload_calculator

settings = get_settings()
configure_logging(json_format=settings.json_logs, log_level=settings.log_level)
logger = get_logger(__name__)

app = FastAPI(
    title="Trade Pricing API",
    description="Unit price, shipping and VAT resolution for orders and quotes",
    version=__version__
)

# Enable CORS for the back-office frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CartItem(BaseModel):
    product_code: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class CalcRequest(BaseModel):
    company_id: str = Field(min_length=1)
    items: List[CartItem]
    shipping_country: str = ""
    free_shipping: bool = False


class VatRequest(BaseModel):
    taxable_amount: Decimal = Field(ge=0)
    country_code: str = ""
    vat_number: Optional[str] = None


class ConfirmShippingRequest(CalcRequest):
    confirmed_shipping: Decimal = Field(ge=0)


@app.get("/")
async def root():
    return {"status": "online", "message": "Trade Pricing API Active"}


def _quote(req: CalcRequest, calculator: OrderTotalCalculator):
    request = QuoteRequest(
        company_id=req.company_id,
        lines=[CartLine(product_code=item.product_code, quantity=item.quantity) for item in req.items],
        shipping_country=req.shipping_country,
        free_shipping=req.free_shipping,
    )
    try:
        return calculator.quote(request)
    except MissingCompany as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLineItem as e:
        raise HTTPException(status_code=400, detail=e.message)
    except PricingError as e:
        logger.warning("Quote rejected", company_id=req.company_id, reason=e.message)
        raise HTTPException(status_code=400, detail=e.message)


@app.post("/calculate")
async def calculate_quote(req: CalcRequest, calculator: OrderTotalCalculator = Depends(get_calculator)):
    return _quote(req, calculator).to_record()


@app.post("/confirm-shipping")
async def confirm_shipping(req: ConfirmShippingRequest, calculator: OrderTotalCalculator = Depends(get_calculator)):
    quote = _quote(req, calculator)
    try:
        return calculator.confirm_shipping(quote, req.confirmed_shipping).to_record()
    except InvalidAmount as e:
        raise HTTPException(status_code=400, detail=e.message)


@app.get("/price/{company_id}/{product_code}")
async def get_unit_price(company_id: str, product_code: str, calculator: OrderTotalCalculator = Depends(get_calculator)):
    company = calculator.store.get_company(company_id)
    if company is None:
        raise HTTPException(status_code=404, detail=f"Company {company_id!r} not found")
    try:
        resolution = calculator.prices.resolve_unit_price(company.company_id, company.type, product_code)
    except InvalidLineItem as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {
        "company_id": company.company_id,
        "product_code": resolution.product_code,
        "unit_price": str(resolution.unit_price),
        "price_source": resolution.price_source.value,
        "warnings": resolution.warnings,
        "trace": [t.__dict__ for t in resolution.trace],
    }


@app.post("/vat")
async def resolve_vat(req: VatRequest, calculator: OrderTotalCalculator = Depends(get_calculator)):
    treatment = calculator.vat.resolve(req.taxable_amount, req.country_code, req.vat_number)
    return {
        "tax_zone": treatment.tax_zone.value,
        "vat_rate": str(treatment.vat_rate),
        "vat_amount": str(treatment.vat_amount),
        "vat_exempt_reason": treatment.vat_exempt_reason,
    }


@app.get("/shipping/{country_code}")
async def estimate_shipping(
    country_code: str,
    subtotal: Decimal = Decimal("0"),
    calculator: OrderTotalCalculator = Depends(get_calculator),
):
    if subtotal < 0:
        raise HTTPException(status_code=400, detail="Subtotal must be non-negative")
    return {
        "country_code": calculator.rules.normalize(country_code),
        "subtotal": str(subtotal),
        "predicted_shipping": str(calculator.shipping.estimate(country_code, subtotal)),
        "rate_found": calculator.shipping.has_rate(country_code),
    }


@app.post("/system/reload")
async def reload_data():
    calculator = reload_calculator()
    logger.info("Pricing data reloaded")
    return {"success": True, "store": type(calculator.store).__name__}


@app.get("/system/status")
async def get_status(calculator: OrderTotalCalculator = Depends(get_calculator)):
    return {
        "engine_active": True,
        "home_country": calculator.rules.home_country,
        "eu_countries": len(calculator.rules.eu_countries),
        "standard_vat_rate": str(calculator.vat.standard_rate),
        "currency": calculator.settings.currency,
        "default_shipping": str(calculator.settings.default_shipping),
        "volume_pricing": calculator.volume is not None,
    }
