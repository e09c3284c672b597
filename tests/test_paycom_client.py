from decimal import Decimal

import httpx
import pytest

from application.dtos.payments import GatewayResult
from application.ports.payment_gateway import PaymentGateway
from domain.payment.entity import Payment, PaymentState
from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.payments.exceptions import DeclineError, InvalidResponseError
from infrastructure.external.payments.paycom_client import PaycomClient
from infrastructure.external.payments.signing import sign
from core.settings import PaycomSettings, PaymentSettings

from tests.fakes import CREDENTIALS, FIXED_TIME, PAYCOM_URL


def _authorized(order_id: str = "order-1", amount: str = "100.00") -> Payment:
    return Payment(
        id=1,
        order_id=order_id,
        amount=Decimal(amount),
        currency="USD",
        state=PaymentState.AUTHORIZATION,
        remote_id="txn-1",
    )


@pytest.mark.asyncio
async def test_authorize_request_layout(fake_paycom, new_payment, card):
    result = await fake_paycom.client().authorize(new_payment, card)

    (pairs,) = fake_paycom.requests
    assert [k for k, _ in pairs] == [
        "username", "type", "key_id", "hash", "time",
        "ccnumber", "ccexp", "amount", "orderid", "cvv",
        "processor_id",
    ]
    params = dict(pairs)
    assert params["username"] == "test-user"
    assert params["type"] == "auth"
    assert params["key_id"] == "key-1"
    assert params["time"] == str(FIXED_TIME)
    assert params["ccnumber"] == "4111111111111111"
    assert params["ccexp"] == "092030"
    assert params["amount"] == "100.00"
    assert params["orderid"] == "order-1"
    assert params["cvv"] == "123"
    assert params["processor_id"] == "proc-9"
    assert params["hash"] == sign(["order-1", "100.00", str(FIXED_TIME)], CREDENTIALS.key)

    assert isinstance(result, GatewayResult)
    assert result.transaction_type == "auth"
    assert result.transaction_id == "txn-1"
    assert result.response_code == "100"


@pytest.mark.asyncio
async def test_each_request_is_signed_with_a_fresh_timestamp(fake_paycom, new_payment, card):
    ticks = iter([1700000001, 1700000002])
    client = fake_paycom.client(clock=lambda: next(ticks))

    await client.authorize(new_payment, card)
    await client.authorize(new_payment, card)

    first, second = fake_paycom.params(0), fake_paycom.params(1)
    assert (first["time"], second["time"]) == ("1700000001", "1700000002")
    assert first["hash"] != second["hash"]


@pytest.mark.asyncio
async def test_capture_sends_sale_for_the_authorization(fake_paycom):
    await fake_paycom.client().capture(_authorized(), Decimal("60"))

    params = fake_paycom.params()
    assert params["type"] == "sale"
    assert params["transactionid"] == "txn-1"
    assert params["amount"] == "60.00"
    assert params["hash"] == sign(["order-1", "60.00", str(FIXED_TIME)], CREDENTIALS.key)
    assert "ccnumber" not in params


@pytest.mark.asyncio
async def test_void_addresses_the_authorization(fake_paycom):
    await fake_paycom.client().void(_authorized())

    params = fake_paycom.params()
    assert params["type"] == "void"
    assert params["transactionid"] == "txn-1"
    assert "amount" not in params


@pytest.mark.asyncio
async def test_refund_uses_processor_spelling(fake_paycom):
    await fake_paycom.client().refund(_authorized(), Decimal("40.5"))

    params = fake_paycom.params()
    assert params["type"] == "refound"
    assert params["transactionid"] == "txn-1"
    assert params["amount"] == "40.50"
    assert "ccnumber" not in params


@pytest.mark.asyncio
async def test_refund_with_card_includes_card_fields(fake_paycom, card):
    await fake_paycom.client().refund(_authorized(), Decimal("10"), card)

    params = fake_paycom.params()
    assert params["ccnumber"] == "4111111111111111"
    assert params["ccexp"] == "092030"
    assert "cvv" not in params


@pytest.mark.asyncio
async def test_client_never_mutates_the_payment(fake_paycom, new_payment, card):
    fake_paycom.replies.append({"response": "2", "response_code": "200"})
    before = vars(new_payment).copy()

    with pytest.raises(DeclineError):
        await fake_paycom.client().authorize(new_payment, card)

    assert vars(new_payment) == before


@pytest.mark.asyncio
async def test_authorization_without_transaction_id_is_invalid(fake_paycom, new_payment, card):
    fake_paycom.replies.append({"transactionid": ""})
    with pytest.raises(InvalidResponseError):
        await fake_paycom.client().authorize(new_payment, card)


@pytest.mark.asyncio
async def test_reply_signed_with_wrong_key_is_rejected(fake_paycom, new_payment, card):
    fake_paycom.replies.append({"_secret": "not-the-key"})
    with pytest.raises(InvalidResponseError):
        await fake_paycom.client().authorize(new_payment, card)


@pytest.mark.asyncio
async def test_gateway_factory_builds_paycom_client():
    settings = PaymentSettings(
        paycom=PaycomSettings(username="u", key="k", key_id="1", url=PAYCOM_URL),
    )
    gateway = get_payment_gateway(settings, http_client=httpx.AsyncClient())
    assert isinstance(gateway, PaycomClient)
    assert isinstance(gateway, PaymentGateway)
    assert gateway.url == PAYCOM_URL
    assert gateway.credentials.key == "k"
    await gateway.aclose()


def test_gateway_factory_requires_credentials():
    with pytest.raises(RuntimeError):
        get_payment_gateway(PaymentSettings(paycom=PaycomSettings(username="u", key=None, key_id="1")))
