"""
支付数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import (
    Boolean, Column, Integer, String, Numeric, DateTime,
    Index, ForeignKey
)
from datetime import datetime, timezone

from .base import Base


class PaymentModel(Base):
    """
    支付数据库模型

    这是数据库表的映射，不包含业务逻辑
    所有业务规则都在 domain.payment.entity.Payment 中
    """
    __tablename__ = "payments"

    # 主键
    id = Column(Integer, primary_key=True, index=True)

    # 订单信息
    order_id = Column(String(100), unique=True, index=True, nullable=False, comment="订单ID")

    # 渠道交易ID（授权成功后才有值）
    remote_id = Column(String(200), nullable=True, index=True, comment="Paycom transactionid")

    # 金额信息（使用 Numeric 存储精确金额）
    amount = Column(Numeric(precision=15, scale=2), nullable=False, comment="支付金额（扣款后为实际扣款金额）")
    currency = Column(String(3), nullable=False, default="USD", comment="货币代码 ISO-4217")
    refunded_amount = Column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=0,
        comment="已退款金额"
    )

    # 状态
    state = Column(
        String(50),
        nullable=False,
        default="new",
        index=True,
        comment="支付状态: new/authorization/completed/authorization_voided/partially_refunded/refunded"
    )

    payment_method_id = Column(
        Integer,
        ForeignKey("payment_methods.id", ondelete="SET NULL"),
        nullable=True,
        comment="关联的支付方式ID"
    )

    # 时间戳
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="更新时间"
    )
    authorized_at = Column(DateTime(timezone=True), nullable=True, comment="授权时间")
    completed_at = Column(DateTime(timezone=True), nullable=True, comment="扣款时间")

    # 索引
    __table_args__ = (
        Index("ix_payments_created_at", "created_at"),
    )

    def __repr__(self):
        return (
            f"<PaymentModel(id={self.id}, order_id='{self.order_id}', "
            f"amount={self.amount}, state='{self.state}')>"
        )


class PaymentMethodModel(Base):
    """
    支付方式数据库模型

    只保存卡号后4位，创建后不可修改
    """
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True, index=True)

    card_type = Column(String(20), nullable=False, comment="卡组织: visa/mastercard/amex")
    card_number = Column(String(4), nullable=False, comment="卡号后4位")
    exp_month = Column(Integer, nullable=False, comment="有效期月份")
    exp_year = Column(Integer, nullable=False, comment="有效期年份")
    remote_id = Column(String(200), nullable=True, comment="渠道侧标识（不支持存卡时为 -1）")
    reusable = Column(Boolean, nullable=False, default=False, comment="是否可复用")
    expires_at = Column(DateTime(timezone=True), nullable=True, comment="失效时间")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )

    def __repr__(self):
        return (
            f"<PaymentMethodModel(id={self.id}, card_type='{self.card_type}', "
            f"card_number='{self.card_number}')>"
        )
