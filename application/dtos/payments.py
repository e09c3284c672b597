"""
Payment DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.types import condecimal

# Common ISO-4217 currencies (extend as needed)
ISO_4217 = {
    "USD", "EUR", "GBP", "CRC", "GTQ", "HNL", "NIO", "PAB", "MXN", "CAD",
}

CARD_TYPES = {"amex", "dinersclub", "discover", "jcb", "maestro", "mastercard", "visa"}


class Expiration(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1000, le=9999)


class CardDetails(BaseModel):
    """Card data as entered by the customer. Never persisted."""
    type: str
    number: str
    expiration: Expiration
    security_code: str

    @field_validator("type")
    @classmethod
    def _validate_type(cls, v: str) -> str:
        t = (v or "").strip().lower()
        if t not in CARD_TYPES:
            raise ValueError("unsupported card type")
        return t

    @field_validator("number")
    @classmethod
    def _normalize_number(cls, v: str) -> str:
        digits = (v or "").replace(" ", "").replace("-", "")
        if not digits.isdigit() or not 12 <= len(digits) <= 19:
            raise ValueError("card number must contain 12 to 19 digits")
        return digits

    @field_validator("security_code")
    @classmethod
    def _validate_security_code(cls, v: str) -> str:
        s = (v or "").strip()
        if not s.isdigit() or len(s) not in (3, 4):
            raise ValueError("security code must contain 3 or 4 digits")
        return s

    @property
    def last4(self) -> str:
        return self.number[-4:]

    @property
    def ccexp(self) -> str:
        return f"{self.expiration.month:02d}{self.expiration.year}"

    def __repr__(self) -> str:
        return f"CardDetails(type={self.type!r}, last4={self.last4!r})"

    __str__ = __repr__


class GatewayResult(BaseModel):
    """Validated outcome of one Paycom exchange."""
    transaction_type: str
    transaction_id: str
    order_id: Optional[str] = None
    amount: Optional[str] = None
    response_code: str
    raw: dict[str, str] = Field(default_factory=dict)


class CreatePaymentRequest(BaseModel):
    order_id: str = Field(min_length=1, max_length=100)
    amount: condecimal(gt=0, max_digits=15, decimal_places=2)  # type: ignore[valid-type]
    currency: str = Field(default="USD")
    payment_method_id: Optional[int] = None

    @field_validator("currency")
    @classmethod
    def _upper_and_validate_currency(cls, v: str) -> str:
        u = (v or "").upper()
        if len(u) != 3 or not u.isalpha():
            raise ValueError("currency must be ISO-4217 alpha-3")
        if u not in ISO_4217:
            raise ValueError("unsupported currency")
        return u


class AuthorizeRequest(BaseModel):
    card: CardDetails
    capture: bool = False


class CaptureRequest(BaseModel):
    amount: Optional[condecimal(gt=0, decimal_places=2)] = None  # type: ignore[valid-type]


class RefundRequest(BaseModel):
    amount: Optional[condecimal(gt=0, decimal_places=2)] = None  # type: ignore[valid-type]
    card: Optional[CardDetails] = None


class CreatePaymentMethodRequest(BaseModel):
    card: CardDetails


class PaymentOut(BaseModel):
    id: int
    order_id: str
    amount: Decimal
    currency: str
    state: str
    remote_id: Optional[str] = None
    refunded_amount: Decimal
    payment_method_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("state", mode="before")
    @classmethod
    def _state_value(cls, v: Any) -> str:
        return getattr(v, "value", v)


class PaymentMethodOut(BaseModel):
    id: int
    card_type: str
    card_number: str
    exp_month: int
    exp_year: int
    reusable: bool
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
