"""
Per-operation Paycom request builders.

Every request starts with the same signed header block and ends with
`processor_id`; the builders only differ in the fields in between.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import ClassVar, Optional

from application.dtos.payments import CardDetails
from domain.payment.entity import Payment
from infrastructure.external.payments.signing import REQUEST_HASH_FIELDS, sign_fields
from shared.codes.payment_codes import TransactionType


@dataclass(frozen=True)
class PaycomCredentials:
    username: str
    key: str
    key_id: str
    processor_id: str = ""


def format_amount(amount: Decimal) -> str:
    return str(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class RequestBuilder(ABC):
    transaction_type: ClassVar[str]

    def build(
        self,
        credentials: PaycomCredentials,
        *,
        payment: Payment,
        amount: Decimal,
        timestamp: int,
        card: Optional[CardDetails] = None,
    ) -> dict[str, str]:
        formatted = format_amount(amount)
        signed = {"orderid": payment.order_id, "amount": formatted, "time": timestamp}
        params = {
            "username": credentials.username,
            "type": self.transaction_type,
            "key_id": credentials.key_id,
            "hash": sign_fields(signed, REQUEST_HASH_FIELDS, credentials.key),
            "time": str(timestamp),
        }
        params.update(self.operation_fields(payment, formatted, card))
        params["processor_id"] = credentials.processor_id
        return params

    @abstractmethod
    def operation_fields(self, payment: Payment, amount: str, card: Optional[CardDetails]) -> dict[str, str]:
        ...


class AuthRequestBuilder(RequestBuilder):
    transaction_type = TransactionType.AUTH

    def operation_fields(self, payment, amount, card):
        if card is None:
            raise ValueError("card details are required to authorize a payment")
        return {
            "ccnumber": card.number,
            "ccexp": card.ccexp,
            "amount": amount,
            "orderid": payment.order_id,
            "cvv": card.security_code,
        }


class SaleRequestBuilder(RequestBuilder):
    transaction_type = TransactionType.SALE

    def operation_fields(self, payment, amount, card):
        return {"transactionid": payment.remote_id or "", "amount": amount}


class VoidRequestBuilder(RequestBuilder):
    transaction_type = TransactionType.VOID

    def operation_fields(self, payment, amount, card):
        return {"transactionid": payment.remote_id or ""}


class RefundRequestBuilder(RequestBuilder):
    transaction_type = TransactionType.REFUND

    def operation_fields(self, payment, amount, card):
        fields = {"transactionid": payment.remote_id or "", "amount": amount}
        if card is not None:
            fields["ccnumber"] = card.number
            fields["ccexp"] = card.ccexp
        return fields


BUILDERS: dict[str, RequestBuilder] = {
    b.transaction_type: b
    for b in (AuthRequestBuilder(), SaleRequestBuilder(), VoidRequestBuilder(), RefundRequestBuilder())
}
