"""
Payment specific codes and Paycom protocol constants.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Gateway outcomes (6xxxx)
    DECLINED = 60000
    AUTHENTICATION_FAILED = 60001
    INVALID_RESPONSE = 60002
    TRANSPORT_ERROR = 60003

    # State machine contract (61xxx)
    INVALID_STATE = 61000
    INVALID_REFUND_AMOUNT = 61001
    ALREADY_EXISTS = 61002


class PaycomResponse(IntEnum):
    """Values of the `response` field."""
    APPROVED = 1
    DECLINED = 2
    ERROR = 3


# `response_code` value for an approved transaction
RESPONSE_CODE_SUCCESS = 100


class TransactionType:
    """Values of the `type` request field."""
    AUTH = "auth"
    SALE = "sale"
    VOID = "void"
    # Spelled this way by the processor
    REFUND = "refound"
