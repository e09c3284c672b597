"""
支付仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from domain.common.exceptions import NotFoundException, PaymentAlreadyExistsException
from domain.payment.entity import Payment, PaymentMethod, PaymentState
from domain.payment.repository import PaymentMethodRepository, PaymentRepository
from infrastructure.models.payment import PaymentMethodModel, PaymentModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyPaymentRepository(PaymentRepository):
    """支付仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: PaymentModel) -> Payment:
        """将数据库模型转换为领域实体"""
        return Payment(
            id=model.id,
            order_id=model.order_id,
            amount=Decimal(str(model.amount)),
            currency=model.currency,
            state=PaymentState(model.state),
            remote_id=model.remote_id,
            refunded_amount=Decimal(str(model.refunded_amount)),
            payment_method_id=model.payment_method_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
            authorized_at=model.authorized_at,
            completed_at=model.completed_at,
        )

    def _to_model(self, entity: Payment) -> PaymentModel:
        """将领域实体转换为数据库模型"""
        return PaymentModel(
            id=entity.id,
            order_id=entity.order_id,
            amount=entity.amount,
            currency=entity.currency,
            state=entity.state.value,
            remote_id=entity.remote_id,
            refunded_amount=entity.refunded_amount,
            payment_method_id=entity.payment_method_id,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            authorized_at=entity.authorized_at,
            completed_at=entity.completed_at,
        )

    async def create(self, payment: Payment) -> Payment:
        """创建支付记录"""
        try:
            db_payment = self._to_model(payment)
            self.session.add(db_payment)
            await self.session.flush()
            await self.session.refresh(db_payment)
            logger.info(
                "payment_created",
                payment_id=db_payment.id,
                order_id=db_payment.order_id,
                amount=str(db_payment.amount),
            )
            return self._to_entity(db_payment)
        except IntegrityError as e:
            await self.session.rollback()
            if "order_id" in str(e).lower():
                logger.warning("payment_create_conflict", order_id=payment.order_id)
                raise PaymentAlreadyExistsException(payment.order_id) from e
            raise

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        """根据ID获取支付"""
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.id == payment_id)
        )
        db_payment = result.scalar_one_or_none()
        return self._to_entity(db_payment) if db_payment else None

    async def get_for_update(self, payment_id: int) -> Optional[Payment]:
        """根据ID获取支付并加行锁（SQLite 下 FOR UPDATE 会被忽略）"""
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.id == payment_id).with_for_update()
        )
        db_payment = result.scalar_one_or_none()
        return self._to_entity(db_payment) if db_payment else None

    async def get_by_order_id(self, order_id: str) -> Optional[Payment]:
        """根据订单ID获取支付"""
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.order_id == order_id)
        )
        db_payment = result.scalar_one_or_none()
        return self._to_entity(db_payment) if db_payment else None

    async def update(self, payment: Payment) -> Payment:
        """更新支付记录"""
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.id == payment.id)
        )
        db_payment = result.scalar_one_or_none()

        if not db_payment:
            raise NotFoundException("payment", payment.id)

        # 更新字段
        db_payment.amount = payment.amount
        db_payment.state = payment.state.value
        db_payment.remote_id = payment.remote_id
        db_payment.refunded_amount = payment.refunded_amount
        db_payment.updated_at = payment.updated_at
        db_payment.authorized_at = payment.authorized_at
        db_payment.completed_at = payment.completed_at

        await self.session.flush()
        await self.session.refresh(db_payment)

        logger.info(
            "payment_updated",
            payment_id=db_payment.id,
            order_id=db_payment.order_id,
            state=db_payment.state
        )

        return self._to_entity(db_payment)


class SQLAlchemyPaymentMethodRepository(PaymentMethodRepository):
    """支付方式仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: PaymentMethodModel) -> PaymentMethod:
        return PaymentMethod(
            id=model.id,
            card_type=model.card_type,
            card_number=model.card_number,
            exp_month=model.exp_month,
            exp_year=model.exp_year,
            remote_id=model.remote_id,
            reusable=model.reusable,
            expires_at=model.expires_at,
            created_at=model.created_at,
        )

    def _to_model(self, entity: PaymentMethod) -> PaymentMethodModel:
        return PaymentMethodModel(
            id=entity.id,
            card_type=entity.card_type,
            card_number=entity.card_number,
            exp_month=entity.exp_month,
            exp_year=entity.exp_year,
            remote_id=entity.remote_id,
            reusable=entity.reusable,
            expires_at=entity.expires_at,
            created_at=entity.created_at,
        )

    async def create(self, method: PaymentMethod) -> PaymentMethod:
        """创建支付方式"""
        db_method = self._to_model(method)
        self.session.add(db_method)
        await self.session.flush()
        await self.session.refresh(db_method)
        return self._to_entity(db_method)

    async def get_by_id(self, method_id: int) -> Optional[PaymentMethod]:
        result = await self.session.execute(
            select(PaymentMethodModel).where(PaymentMethodModel.id == method_id)
        )
        db_method = result.scalar_one_or_none()
        return self._to_entity(db_method) if db_method else None

    async def delete(self, method_id: int) -> bool:
        """删除支付方式"""
        result = await self.session.execute(
            select(PaymentMethodModel).where(PaymentMethodModel.id == method_id)
        )
        db_method = result.scalar_one_or_none()

        if not db_method:
            return False

        await self.session.delete(db_method)
        await self.session.flush()
        return True
