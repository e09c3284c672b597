import copy
from decimal import Decimal
from typing import Optional

import httpx
import pytest

from application.services.payment_service import PaymentApplicationService
from domain.common.exceptions import (
    DomainValidationException,
    InvalidRefundAmountError,
    InvalidStateError,
    NotFoundException,
)
from domain.payment.entity import Payment, PaymentMethod, PaymentState
from domain.payment.events import PaymentAuthorized, PaymentCaptured, PaymentRefunded
from domain.payment.repository import PaymentMethodRepository, PaymentRepository
from infrastructure.external.payments.exceptions import (
    AuthenticationError,
    DeclineError,
    InvalidResponseError,
    TransportError,
)


class InMemoryPaymentRepository(PaymentRepository):
    def __init__(self, fail_updates: bool = False):
        self.items: dict[int, Payment] = {}
        self.updates = 0
        self.fail_updates = fail_updates

    async def create(self, payment: Payment) -> Payment:
        payment.id = payment.id or len(self.items) + 1
        self.items[payment.id] = copy.copy(payment)
        return payment

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        item = self.items.get(payment_id)
        return copy.copy(item) if item else None

    async def get_for_update(self, payment_id: int) -> Optional[Payment]:
        return await self.get_by_id(payment_id)

    async def get_by_order_id(self, order_id: str) -> Optional[Payment]:
        return next((copy.copy(p) for p in self.items.values() if p.order_id == order_id), None)

    async def update(self, payment: Payment) -> Payment:
        if self.fail_updates:
            raise RuntimeError("database unavailable")
        self.updates += 1
        self.items[payment.id] = copy.copy(payment)
        return payment


class InMemoryPaymentMethodRepository(PaymentMethodRepository):
    def __init__(self):
        self.items: dict[int, PaymentMethod] = {}

    async def create(self, method: PaymentMethod) -> PaymentMethod:
        method.id = len(self.items) + 1
        self.items[method.id] = method
        return method

    async def get_by_id(self, method_id: int) -> Optional[PaymentMethod]:
        return self.items.get(method_id)

    async def delete(self, method_id: int) -> bool:
        return self.items.pop(method_id, None) is not None


@pytest.fixture
def repository():
    return InMemoryPaymentRepository()


@pytest.fixture
def service(fake_paycom, repository):
    return PaymentApplicationService(fake_paycom.client(), repository, InMemoryPaymentMethodRepository())


async def _completed(service, payment, card) -> Payment:
    await service.authorize(payment, card, auto_capture=True)
    return payment


@pytest.mark.asyncio
async def test_authorize_records_remote_id_and_persists(service, repository, fake_paycom, new_payment, card):
    await repository.create(new_payment)

    await service.authorize(new_payment, card)

    assert new_payment.state is PaymentState.AUTHORIZATION
    assert new_payment.remote_id == "txn-1"
    assert repository.items[1].state is PaymentState.AUTHORIZATION
    assert fake_paycom.types == ["auth"]
    assert isinstance(service.events[-1], PaymentAuthorized)


@pytest.mark.asyncio
async def test_authorize_with_auto_capture_issues_auth_then_sale(service, fake_paycom, new_payment, card):
    await service.authorize(new_payment, card, auto_capture=True)

    assert fake_paycom.types == ["auth", "sale"]
    assert fake_paycom.params(1)["transactionid"] == "txn-1"
    assert fake_paycom.params(1)["amount"] == "100.00"
    assert new_payment.state is PaymentState.COMPLETED
    assert [type(e) for e in service.events] == [PaymentAuthorized, PaymentCaptured]


@pytest.mark.asyncio
async def test_authorize_on_completed_payment_is_rejected_without_network(service, fake_paycom, new_payment, card):
    new_payment.state = PaymentState.COMPLETED
    new_payment.remote_id = "txn-9"
    before = vars(new_payment).copy()

    with pytest.raises(InvalidStateError):
        await service.authorize(new_payment, card)

    assert vars(new_payment) == before
    assert fake_paycom.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply, error",
    [
        ({"response": "2", "response_code": "200"}, DeclineError),
        ({"response": "3", "response_code": "300"}, AuthenticationError),
        ({"cvvresponse": "N"}, DeclineError),
        ({"_secret": "forged"}, InvalidResponseError),
        (httpx.ConnectError("refused"), TransportError),
        (httpx.Response(500), TransportError),
    ],
)
async def test_failed_authorization_leaves_payment_untouched(
    service, repository, fake_paycom, new_payment, card, reply, error
):
    fake_paycom.replies.append(reply)
    before = vars(new_payment).copy()

    with pytest.raises(error):
        await service.authorize(new_payment, card)

    assert vars(new_payment) == before
    assert repository.updates == 0
    assert service.events == []


@pytest.mark.asyncio
async def test_declined_auto_capture_keeps_the_authorization(service, fake_paycom, new_payment, card):
    fake_paycom.replies.extend([{}, {"response": "2", "response_code": "200"}])

    with pytest.raises(DeclineError):
        await service.authorize(new_payment, card, auto_capture=True)

    assert new_payment.state is PaymentState.AUTHORIZATION
    assert new_payment.remote_id == "txn-1"


@pytest.mark.asyncio
async def test_partial_capture_updates_amount(service, new_payment, card):
    await service.authorize(new_payment, card)
    await service.capture(new_payment, Decimal("60"))

    assert new_payment.state is PaymentState.COMPLETED
    assert new_payment.amount == Decimal("60")
    assert new_payment.refundable_amount() == Decimal("60")


@pytest.mark.asyncio
async def test_capture_above_authorized_amount_is_rejected(service, fake_paycom, new_payment, card):
    await service.authorize(new_payment, card)

    with pytest.raises(DomainValidationException):
        await service.capture(new_payment, Decimal("100.01"))

    assert fake_paycom.types == ["auth"]
    assert new_payment.state is PaymentState.AUTHORIZATION


@pytest.mark.asyncio
async def test_capture_requires_authorization(service, new_payment):
    with pytest.raises(InvalidStateError):
        await service.capture(new_payment)


@pytest.mark.asyncio
async def test_void_authorization(service, fake_paycom, new_payment, card):
    await service.authorize(new_payment, card)
    await service.void(new_payment)

    assert new_payment.state is PaymentState.AUTHORIZATION_VOIDED
    assert fake_paycom.types == ["auth", "void"]
    with pytest.raises(InvalidStateError):
        await service.capture(new_payment)


@pytest.mark.asyncio
async def test_void_after_capture_is_rejected(service, new_payment, card):
    await _completed(service, new_payment, card)
    with pytest.raises(InvalidStateError):
        await service.void(new_payment)


@pytest.mark.asyncio
async def test_partial_then_full_refund(service, fake_paycom, new_payment, card):
    await _completed(service, new_payment, card)

    await service.refund(new_payment, Decimal("40"))
    assert new_payment.state is PaymentState.PARTIALLY_REFUNDED
    assert new_payment.refunded_amount == Decimal("40")

    await service.refund(new_payment, Decimal("60"))
    assert new_payment.state is PaymentState.REFUNDED
    assert new_payment.refunded_amount == Decimal("100")

    with pytest.raises(InvalidRefundAmountError):
        await service.refund(new_payment, Decimal("1"))
    assert fake_paycom.types == ["auth", "sale", "refound", "refound"]
    assert isinstance(service.events[-1], PaymentRefunded)


@pytest.mark.asyncio
async def test_refund_above_balance_is_rejected_without_network(service, fake_paycom, new_payment, card):
    await _completed(service, new_payment, card)
    await service.refund(new_payment, Decimal("40"))

    with pytest.raises(InvalidRefundAmountError):
        await service.refund(new_payment, Decimal("60.01"))

    assert new_payment.refunded_amount == Decimal("40")
    assert fake_paycom.types.count("refound") == 1


@pytest.mark.asyncio
async def test_refund_without_amount_refunds_remaining_balance(service, fake_paycom, new_payment, card):
    await _completed(service, new_payment, card)
    await service.refund(new_payment, Decimal("25"))

    await service.refund(new_payment)

    assert fake_paycom.params()["amount"] == "75.00"
    assert new_payment.state is PaymentState.REFUNDED


@pytest.mark.asyncio
async def test_refund_failure_keeps_balance(service, fake_paycom, new_payment, card):
    await _completed(service, new_payment, card)
    fake_paycom.replies.append({"response": "2", "response_code": "200"})

    with pytest.raises(DeclineError):
        await service.refund(new_payment, Decimal("10"))

    assert new_payment.state is PaymentState.COMPLETED
    assert new_payment.refunded_amount == Decimal("0")


@pytest.mark.asyncio
async def test_persist_failure_restores_payment(fake_paycom, new_payment, card):
    service = PaymentApplicationService(
        fake_paycom.client(),
        InMemoryPaymentRepository(fail_updates=True),
        InMemoryPaymentMethodRepository(),
    )
    before = vars(new_payment).copy()

    with pytest.raises(RuntimeError):
        await service.authorize(new_payment, card)

    assert vars(new_payment) == before
    assert service.events == []


@pytest.mark.asyncio
async def test_create_payment_method_stores_truncated_card(service, card):
    method = await service.create_payment_method(card)

    assert method.id == 1
    assert method.card_type == "visa"
    assert method.card_number == "1111"
    assert (method.exp_month, method.exp_year) == (9, 2030)
    assert method.remote_id == "-1"
    assert method.reusable is False
    assert method.expires_at is not None


@pytest.mark.asyncio
async def test_payment_method_cannot_be_created_twice(service, card):
    method = await service.create_payment_method(card)
    with pytest.raises(DomainValidationException):
        await service.create_payment_method(card, method)


@pytest.mark.asyncio
async def test_delete_payment_method(service, card):
    method = await service.create_payment_method(card)

    await service.delete_payment_method(method)

    with pytest.raises(NotFoundException):
        await service.delete_payment_method(method)


@pytest.mark.asyncio
async def test_refund_before_capture_is_rejected(service, fake_paycom, new_payment, card):
    await service.authorize(new_payment, card)
    with pytest.raises(InvalidStateError):
        await service.refund(new_payment, Decimal("1"))
    assert fake_paycom.types == ["auth"]
