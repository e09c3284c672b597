"""
Application port for the card-processing gateway.

Application services depend on this protocol only; the Paycom client in
infrastructure implements it and is injected from the composition root.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, runtime_checkable

from application.dtos.payments import CardDetails, GatewayResult
from domain.payment.entity import Payment


@runtime_checkable
class PaymentGateway(Protocol):
    """One awaitable call per protocol exchange; implementations never retry
    and never mutate the payment they are given."""

    provider: str

    async def authorize(self, payment: Payment, card: CardDetails) -> GatewayResult: ...

    async def capture(self, payment: Payment, amount: Decimal) -> GatewayResult: ...

    async def void(self, payment: Payment) -> GatewayResult: ...

    async def refund(self, payment: Payment, amount: Decimal, card: Optional[CardDetails] = None) -> GatewayResult: ...

    async def aclose(self) -> None: ...
