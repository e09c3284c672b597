"""
Paycom (Credomatic) adapter implementing the PaymentGateway port.

Each operation builds its request with the matching builder, signs it with a
fresh timestamp from the injected clock, posts it once and validates the reply.
The payment passed in is only read; state changes belong to the application
service.
"""
from __future__ import annotations

import time
from decimal import Decimal
from typing import Callable, Optional

import httpx

from application.dtos.payments import CardDetails, GatewayResult
from domain.payment.entity import Payment
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.builders import BUILDERS, PaycomCredentials
from infrastructure.external.payments.exceptions import InvalidResponseError
from infrastructure.external.payments.validation import validate_response
from shared.codes.payment_codes import TransactionType


Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time())


class PaycomClient(BasePaymentClient):
    provider = "paycom"

    def __init__(
        self,
        credentials: PaycomCredentials,
        url: str,
        *,
        clock: Clock = system_clock,
        timeouts: Optional[dict[str, float]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(timeouts=timeouts, http_client=http_client)
        self.credentials = credentials
        self.url = url
        self._clock = clock

    async def authorize(self, payment: Payment, card: CardDetails) -> GatewayResult:
        return await self._execute(TransactionType.AUTH, payment, payment.amount, card)

    async def capture(self, payment: Payment, amount: Decimal) -> GatewayResult:
        return await self._execute(TransactionType.SALE, payment, amount)

    async def void(self, payment: Payment) -> GatewayResult:
        return await self._execute(TransactionType.VOID, payment, payment.amount)

    async def refund(
        self,
        payment: Payment,
        amount: Decimal,
        card: Optional[CardDetails] = None,
    ) -> GatewayResult:
        return await self._execute(TransactionType.REFUND, payment, amount, card)

    async def _execute(
        self,
        transaction_type: str,
        payment: Payment,
        amount: Decimal,
        card: Optional[CardDetails] = None,
    ) -> GatewayResult:
        params = BUILDERS[transaction_type].build(
            self.credentials,
            payment=payment,
            amount=amount,
            timestamp=self._clock(),
            card=card,
        )
        response = await self.post(self.url, params)
        validate_response(response, self.credentials.key)
        if transaction_type == TransactionType.AUTH and not response.get("transactionid"):
            # capture and void are addressed by this id
            raise InvalidResponseError("Transaction id missing from authorization response")
        return GatewayResult(
            transaction_type=transaction_type,
            transaction_id=response.get("transactionid", ""),
            order_id=response.get("orderid"),
            amount=response.get("amount"),
            response_code=response["response_code"],
            raw=response,
        )
