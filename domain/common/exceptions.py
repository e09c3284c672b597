"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
        format_params: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        self.format_params = format_params
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        message_key: str | None = None,
        format_params: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
            message_key=message_key or "validation.domain",
            format_params=format_params,
        )


class NotFoundException(BusinessException):
    def __init__(self, resource: str, identifier: object):
        super().__init__(
            code=BusinessCode.NOT_FOUND,
            message=f"{resource} not found",
            error_type="NotFound",
            details={"resource": resource, "id": identifier},
            message_key="resource.not_found",
            format_params={"resource": resource},
        )


class InvalidStateError(BusinessException):
    """操作的前置状态不满足（调用方违反状态机契约）"""

    def __init__(self, operation: str, state: str, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(
            code=PaymentCode.INVALID_STATE,
            message=f"Cannot {operation} a payment in state '{state}' (expected one of: {', '.join(allowed)})",
            error_type="InvalidState",
            details={"operation": operation, "state": state, "allowed": allowed},
            field="state",
            message_key="payments.state.invalid",
        )
        self.operation = operation
        self.state = state
        self.allowed = allowed


class InvalidRefundAmountError(BusinessException):
    """退款金额超过剩余可退金额，或不为正数"""

    def __init__(self, amount: Decimal, refundable: Decimal):
        super().__init__(
            code=PaymentCode.INVALID_REFUND_AMOUNT,
            message=f"Refund amount {amount} is invalid; refundable balance is {refundable}",
            error_type="InvalidRefundAmount",
            details={"amount": str(amount), "refundable": str(refundable)},
            field="amount",
            message_key="payments.refund.amount_invalid",
        )
        self.amount = amount
        self.refundable = refundable


class PaymentAlreadyExistsException(BusinessException):
    """订单已存在支付记录"""

    def __init__(self, order_id: str):
        super().__init__(
            code=PaymentCode.ALREADY_EXISTS,
            message=f"A payment already exists for order {order_id}",
            error_type="PaymentAlreadyExists",
            details={"order_id": order_id},
            field="order_id",
            message_key="payments.order.exists",
        )
