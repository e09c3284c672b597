"""
支付领域实体 - 支付聚合根与支付方式
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from enum import Enum

from domain.common.exceptions import (
    DomainValidationException,
    InvalidRefundAmountError,
    InvalidStateError,
)


class PaymentState(str, Enum):
    """支付状态枚举"""
    NEW = "new"                                     # 新建
    AUTHORIZATION = "authorization"                 # 已授权（未扣款）
    COMPLETED = "completed"                         # 已扣款
    AUTHORIZATION_VOIDED = "authorization_voided"   # 授权已撤销
    PARTIALLY_REFUNDED = "partially_refunded"       # 部分退款
    REFUNDED = "refunded"                           # 已全额退款


TERMINAL_STATES = frozenset({PaymentState.AUTHORIZATION_VOIDED, PaymentState.REFUNDED})


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """确保时间为 UTC 时区"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class Payment:
    """
    支付聚合根 - 管理支付生命周期

    业务规则：
    1. 金额必须大于0
    2. 状态转换必须遵循状态机：new -> authorization -> completed -> partially_refunded/refunded，
       authorization -> authorization_voided
    3. 退款金额累计不能超过支付金额
    4. remote_id 在授权成功后才有值
    """

    id: Optional[int]
    order_id: str
    amount: Decimal
    currency: str  # ISO-4217
    state: PaymentState = PaymentState.NEW
    remote_id: Optional[str] = None  # 支付渠道的交易ID
    refunded_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    payment_method_id: Optional[int] = None

    # 时间戳
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    authorized_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        """初始化后验证"""
        self.state = PaymentState(self.state)
        self._validate_amount()
        self._validate_currency()
        self._normalize_timestamps()

    def _validate_amount(self) -> None:
        """业务规则：金额必须大于0，已退款金额不能超过支付金额"""
        if self.amount <= 0:
            raise DomainValidationException(
                f"支付金额必须大于0: {self.amount}",
                field="amount"
            )
        if self.refunded_amount < 0 or self.refunded_amount > self.amount:
            raise DomainValidationException(
                f"已退款金额无效: {self.refunded_amount}",
                field="refunded_amount"
            )

    def _validate_currency(self) -> None:
        """业务规则：货币代码必须是3位字母"""
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise DomainValidationException(
                f"无效的货币代码: {self.currency}",
                field="currency"
            )
        self.currency = self.currency.upper()

    def _normalize_timestamps(self) -> None:
        """规范化所有时间戳为 UTC"""
        self.created_at = _ensure_utc(self.created_at) or datetime.now(timezone.utc)
        self.updated_at = _ensure_utc(self.updated_at) or self.created_at
        self.authorized_at = _ensure_utc(self.authorized_at)
        self.completed_at = _ensure_utc(self.completed_at)

    def assert_state(self, operation: str, *allowed: PaymentState) -> None:
        """前置状态校验，失败抛出 InvalidStateError"""
        if self.state not in allowed:
            raise InvalidStateError(operation, self.state.value, [s.value for s in allowed])

    def refundable_amount(self) -> Decimal:
        """计算可退款金额"""
        return self.amount - self.refunded_amount

    def validate_refund_amount(self, amount: Decimal) -> None:
        """业务规则：0 < 退款金额 <= 剩余可退金额"""
        refundable = self.refundable_amount()
        if amount <= 0 or amount > refundable:
            raise InvalidRefundAmountError(amount, refundable)

    def validate_capture_amount(self, amount: Decimal) -> None:
        """业务规则：0 < 扣款金额 <= 授权金额"""
        if amount <= 0 or amount > self.amount:
            raise DomainValidationException(
                f"扣款金额 {amount} 超出授权金额 {self.amount}",
                field="amount"
            )

    def mark_authorized(self, remote_id: str) -> None:
        """
        标记授权成功

        业务规则：只能从 new 转为 authorization
        """
        self.assert_state("authorize", PaymentState.NEW)
        self.state = PaymentState.AUTHORIZATION
        self.remote_id = remote_id
        self.authorized_at = datetime.now(timezone.utc)
        self.updated_at = self.authorized_at

    def mark_captured(self, amount: Decimal) -> None:
        """
        标记扣款成功，金额更新为实际扣款金额

        业务规则：只能从 authorization 转为 completed
        """
        self.assert_state("capture", PaymentState.AUTHORIZATION)
        self.validate_capture_amount(amount)
        self.state = PaymentState.COMPLETED
        self.amount = amount
        self.completed_at = datetime.now(timezone.utc)
        self.updated_at = self.completed_at

    def mark_voided(self) -> None:
        """撤销授权"""
        self.assert_state("void", PaymentState.AUTHORIZATION)
        self.state = PaymentState.AUTHORIZATION_VOIDED
        self.updated_at = datetime.now(timezone.utc)

    def apply_refund(self, refund_amount: Decimal) -> None:
        """
        应用退款

        业务规则：
        1. 只有已扣款或部分退款的支付才能退款
        2. 退款金额不能超过剩余可退金额
        """
        self.assert_state("refund", PaymentState.COMPLETED, PaymentState.PARTIALLY_REFUNDED)
        self.validate_refund_amount(refund_amount)

        self.refunded_amount += refund_amount
        self.updated_at = datetime.now(timezone.utc)

        if self.refunded_amount >= self.amount:
            self.state = PaymentState.REFUNDED
        else:
            self.state = PaymentState.PARTIALLY_REFUNDED

    def is_final_state(self) -> bool:
        """检查是否为终态"""
        return self.state in TERMINAL_STATES


def calculate_expiration(month: int, year: int) -> datetime:
    """卡片在有效期所在月份结束后失效，返回下个月第一秒（UTC）"""
    last_day = calendar.monthrange(year, month)[1]
    end = datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc)
    return datetime.fromtimestamp(end.timestamp() + 1, tz=timezone.utc)


@dataclass
class PaymentMethod:
    """
    支付方式实体 - 截断后的银行卡引用

    业务规则：
    1. 只保存卡号后4位，完整卡号绝不持久化
    2. 创建后不可修改，只能删除
    3. 该渠道不支持卡片复用（reusable 恒为 False）
    """

    id: Optional[int] = None
    card_type: str = ""
    card_number: str = ""  # 仅后4位
    exp_month: int = 1
    exp_year: int = 1970
    remote_id: Optional[str] = None
    reusable: bool = False
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.card_number and (len(self.card_number) > 4 or not self.card_number.isdigit()):
            raise DomainValidationException(
                "只允许保存卡号后4位",
                field="card_number"
            )
        if not 1 <= self.exp_month <= 12:
            raise DomainValidationException(
                f"无效的有效期月份: {self.exp_month}",
                field="exp_month"
            )
        self.expires_at = _ensure_utc(self.expires_at)
        self.created_at = _ensure_utc(self.created_at) or datetime.now(timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at
