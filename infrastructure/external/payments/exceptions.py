"""
Exceptions raised by the Paycom gateway, mapped to unified BusinessException variants.

Declines and authentication failures are business outcomes: the end user gets a
generic "verify your details" message. Transport and integrity failures are
operator problems: they are logged and the user gets a generic retry-later message.
"""
from __future__ import annotations

from typing import Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class PaymentGatewayError(BusinessException):
    provider = "paycom"
    # Message shown to end users; never carries processor diagnostics
    public_message_key = "payments.error.retry_later"

    def __init__(
        self,
        message: str,
        *,
        code: int,
        error_type: str,
        provider_code: str | None = None,
        details: Optional[dict] = None,
    ):
        full_details = {"provider": self.provider, "provider_code": provider_code}
        if details:
            full_details.update(details)
        super().__init__(
            code=code,
            message=message,
            error_type=error_type,
            details=full_details,
            message_key=self.public_message_key,
        )
        self.provider_code = provider_code


class DeclineError(PaymentGatewayError):
    public_message_key = "payments.error.declined"

    def __init__(self, message: str, *, provider_code: str | None = None, details: Optional[dict] = None):
        super().__init__(
            message,
            code=PaymentCode.DECLINED,
            error_type="PaymentDeclined",
            provider_code=provider_code,
            details=details,
        )


class AuthenticationError(PaymentGatewayError):
    public_message_key = "payments.error.declined"

    def __init__(self, message: str, *, provider_code: str | None = None, details: Optional[dict] = None):
        super().__init__(
            message,
            code=PaymentCode.AUTHENTICATION_FAILED,
            error_type="PaymentAuthenticationFailed",
            provider_code=provider_code,
            details=details,
        )


class InvalidResponseError(PaymentGatewayError):
    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(
            message,
            code=PaymentCode.INVALID_RESPONSE,
            error_type="PaymentInvalidResponse",
            details=details,
        )


class TransportError(PaymentGatewayError):
    def __init__(self, message: str, *, status_code: int | None = None, details: Optional[dict] = None):
        full_details = {"status_code": status_code}
        if details:
            full_details.update(details)
        super().__init__(
            message,
            code=PaymentCode.TRANSPORT_ERROR,
            error_type="PaymentTransportError",
            details=full_details,
        )
        self.status_code = status_code
