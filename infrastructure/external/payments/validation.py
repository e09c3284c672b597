"""
Paycom response validation.

Checks run in a fixed order: approval flag, AVS/CVV flags, response code, then
the response fingerprint. The fingerprint check always runs on an otherwise
approved response, so a tampered or misrouted reply can never be committed.
"""
from __future__ import annotations

from typing import Mapping

from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import (
    AuthenticationError,
    DeclineError,
    InvalidResponseError,
)
from infrastructure.external.payments.signing import RESPONSE_HASH_FIELDS, pick, verify
from shared.codes.payment_codes import RESPONSE_CODE_SUCCESS, PaycomResponse


logger = get_logger(__name__)


def _as_int(value: str | None) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def validate_response(response: Mapping[str, str], secret: str) -> None:
    """Raise unless `response` is an approved, authentic Paycom reply."""
    order_id = response.get("orderid")

    if "response" not in response:
        logger.error("paycom_response_invalid", reason="missing_response", orderid=order_id)
        raise InvalidResponseError("Response value not found")
    outcome = _as_int(response["response"])
    if outcome == PaycomResponse.DECLINED:
        logger.warning("paycom_declined", orderid=order_id, response_code=response.get("response_code"))
        raise DeclineError("Denied transaction", provider_code=response.get("response_code"))
    if outcome == PaycomResponse.ERROR:
        logger.warning("paycom_authentication_failed", orderid=order_id, response_code=response.get("response_code"))
        raise AuthenticationError(
            "Data error in the transaction or system error",
            provider_code=response.get("response_code"),
        )
    if outcome != PaycomResponse.APPROVED:
        logger.error("paycom_response_invalid", reason="unexpected_response", orderid=order_id, response=response["response"])
        raise InvalidResponseError(f"Unexpected response value: {response['response']}")

    avs = response.get("avsresponse")
    if avs:
        logger.warning("paycom_avs_mismatch", orderid=order_id, avsresponse=avs)
        raise DeclineError(f"AVS response error. Code: {avs}", provider_code=avs)
    cvv = response.get("cvvresponse")
    if cvv:
        logger.warning("paycom_cvv_mismatch", orderid=order_id, cvvresponse=cvv)
        raise DeclineError(f"CVV response error. Code: {cvv}", provider_code=cvv)

    if "response_code" not in response:
        logger.error("paycom_response_invalid", reason="missing_response_code", orderid=order_id)
        raise InvalidResponseError("Response code value not found")
    code = response["response_code"]
    if _as_int(code) != RESPONSE_CODE_SUCCESS:
        logger.warning("paycom_declined", orderid=order_id, response_code=code)
        raise DeclineError(f"Denied transaction. Code: {code}", provider_code=code)

    if not verify(pick(response, RESPONSE_HASH_FIELDS), secret, response.get("hash")):
        logger.error("paycom_response_invalid", reason="hash_mismatch", orderid=order_id)
        raise InvalidResponseError("Hash can not be verified")
