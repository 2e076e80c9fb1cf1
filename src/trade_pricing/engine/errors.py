"""Errors raised by the pricing core."""
from typing import Optional


class PricingError(Exception):
    """Base error for pricing and tax calculations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidLineItem(PricingError):
    """A line cannot be priced: bad quantity or unknown product."""

    def __init__(self, product_code: str, quantity: Optional[int] = None, reason: str = "") -> None:
        self.product_code = product_code
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Invalid line item {product_code!r}: {reason}")


class MissingCompany(PricingError):
    """The company id does not resolve to a known company."""

    def __init__(self, company_id: str) -> None:
        self.company_id = company_id
        super().__init__(f"Company {company_id!r} not found")


class InvalidAmount(PricingError):
    """A money input is negative or not a finite number."""
