"""
Application service orchestrating the payment lifecycle.

Every operation follows the same sequence: check the precondition state,
exchange one signed request with the gateway, and only after the response has
been validated apply the transition and persist it. Gateway, validation and
state errors propagate unchanged; on any raising path the payment is left
exactly as it was passed in.

The service is not internally synchronized. Callers must serialize operations
on the same payment (the HTTP layer locks the row for the whole operation).
"""
from __future__ import annotations

import copy
from decimal import Decimal
from typing import Callable, List, Optional

from application.dtos.payments import CardDetails
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger
from domain.common.exceptions import DomainValidationException, NotFoundException
from domain.payment.entity import Payment, PaymentMethod, PaymentState, calculate_expiration
from domain.payment.events import (
    PaymentAuthorized,
    PaymentCaptured,
    PaymentRefunded,
    PaymentVoided,
)
from domain.payment.repository import PaymentMethodRepository, PaymentRepository


logger = get_logger(__name__)

# The processor keeps no card vault, so stored methods carry a placeholder id
UNVAULTED_REMOTE_ID = "-1"


class PaymentApplicationService:
    def __init__(
        self,
        gateway: PaymentGateway,
        payment_repository: PaymentRepository,
        payment_method_repository: PaymentMethodRepository,
    ) -> None:
        self.gateway = gateway
        self.payment_repository = payment_repository
        self.payment_method_repository = payment_method_repository
        self.events: List = []

    async def authorize(self, payment: Payment, card: CardDetails, auto_capture: bool = False) -> Payment:
        """Reserve the payment amount on the card; optionally capture it right away."""
        payment.assert_state("authorize", PaymentState.NEW)
        logger.info(
            "payment_authorize_request",
            payment_id=payment.id,
            order_id=payment.order_id,
            amount=str(payment.amount),
            auto_capture=auto_capture,
        )
        result = await self.gateway.authorize(payment, card)
        await self._commit(payment, lambda p: p.mark_authorized(result.transaction_id))
        logger.info("payment_authorized", payment_id=payment.id, order_id=payment.order_id, remote_id=payment.remote_id)
        self.events.append(PaymentAuthorized(
            order_id=payment.order_id,
            payment_id=payment.id,
            remote_id=payment.remote_id,
            amount=str(payment.amount),
        ))
        if auto_capture:
            await self.capture(payment)
        return payment

    async def capture(self, payment: Payment, amount: Optional[Decimal] = None) -> Payment:
        """Capture an authorization; the full authorized amount when `amount` is omitted."""
        payment.assert_state("capture", PaymentState.AUTHORIZATION)
        amount = payment.amount if amount is None else Decimal(amount)
        payment.validate_capture_amount(amount)
        logger.info("payment_capture_request", payment_id=payment.id, order_id=payment.order_id, amount=str(amount))
        await self.gateway.capture(payment, amount)
        await self._commit(payment, lambda p: p.mark_captured(amount))
        logger.info("payment_captured", payment_id=payment.id, order_id=payment.order_id, amount=str(amount))
        self.events.append(PaymentCaptured(
            order_id=payment.order_id,
            payment_id=payment.id,
            remote_id=payment.remote_id,
            amount=str(amount),
        ))
        return payment

    async def void(self, payment: Payment) -> Payment:
        payment.assert_state("void", PaymentState.AUTHORIZATION)
        logger.info("payment_void_request", payment_id=payment.id, order_id=payment.order_id)
        await self.gateway.void(payment)
        await self._commit(payment, lambda p: p.mark_voided())
        logger.info("payment_voided", payment_id=payment.id, order_id=payment.order_id)
        self.events.append(PaymentVoided(order_id=payment.order_id, payment_id=payment.id, remote_id=payment.remote_id))
        return payment

    async def refund(
        self,
        payment: Payment,
        amount: Optional[Decimal] = None,
        card: Optional[CardDetails] = None,
    ) -> Payment:
        """Refund captured funds; the remaining balance when `amount` is omitted."""
        amount = payment.refundable_amount() if amount is None else Decimal(amount)
        if payment.state is PaymentState.REFUNDED:
            # nothing left to refund; report the balance rather than the state
            payment.validate_refund_amount(amount)
        payment.assert_state("refund", PaymentState.COMPLETED, PaymentState.PARTIALLY_REFUNDED)
        payment.validate_refund_amount(amount)
        logger.info("payment_refund_request", payment_id=payment.id, order_id=payment.order_id, amount=str(amount))
        await self.gateway.refund(payment, amount, card)
        await self._commit(payment, lambda p: p.apply_refund(amount))
        logger.info(
            "payment_refunded",
            payment_id=payment.id,
            order_id=payment.order_id,
            amount=str(amount),
            refunded_total=str(payment.refunded_amount),
            state=payment.state.value,
        )
        self.events.append(PaymentRefunded(
            order_id=payment.order_id,
            payment_id=payment.id,
            remote_id=payment.remote_id,
            amount=str(amount),
            refunded_total=str(payment.refunded_amount),
        ))
        return payment

    async def create_payment_method(self, card: CardDetails, method: Optional[PaymentMethod] = None) -> PaymentMethod:
        """Store a truncated reference to `card`. Only the last 4 digits are kept."""
        method = method or PaymentMethod()
        if method.id is not None:
            raise DomainValidationException("Payment method already created", field="id")
        method.card_type = card.type
        method.card_number = card.last4
        method.exp_month = card.expiration.month
        method.exp_year = card.expiration.year
        method.expires_at = calculate_expiration(card.expiration.month, card.expiration.year)
        method.reusable = False
        method.remote_id = UNVAULTED_REMOTE_ID
        created = await self.payment_method_repository.create(method)
        logger.info("payment_method_created", payment_method_id=created.id, card_type=created.card_type)
        return created

    async def delete_payment_method(self, method: PaymentMethod) -> None:
        if method.id is None or not await self.payment_method_repository.delete(method.id):
            raise NotFoundException("payment_method", method.id)
        logger.info("payment_method_deleted", payment_method_id=method.id)

    async def _commit(self, payment: Payment, transition: Callable[[Payment], None]) -> None:
        snapshot = copy.copy(payment)
        try:
            transition(payment)
            await self.payment_repository.update(payment)
        except Exception:
            vars(payment).update(vars(snapshot))
            raise
