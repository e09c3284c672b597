"""
支付用例服务（application/services）- 每个用例一个事务

负责开启 Unit of Work、加锁读取支付、调用状态机并返回 DTO。
同一笔支付的操作通过 SELECT ... FOR UPDATE 串行执行。
"""
from typing import Callable

from application.dtos.payments import (
    AuthorizeRequest,
    CaptureRequest,
    CreatePaymentMethodRequest,
    CreatePaymentRequest,
    PaymentMethodOut,
    PaymentOut,
    RefundRequest,
)
from application.ports.payment_gateway import PaymentGateway
from application.services.payment_service import PaymentApplicationService
from domain.common.exceptions import NotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.payment.entity import Payment, PaymentMethod


class PaymentOperationsService:
    """支付用例服务"""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork], gateway: PaymentGateway):
        self._uow_factory = uow_factory
        self._gateway = gateway

    def _state_machine(self, uow: AbstractUnitOfWork) -> PaymentApplicationService:
        return PaymentApplicationService(
            self._gateway,
            uow.payment_repository,
            uow.payment_method_repository,
        )

    @staticmethod
    async def _lock_payment(uow: AbstractUnitOfWork, payment_id: int) -> Payment:
        payment = await uow.payment_repository.get_for_update(payment_id)
        if payment is None:
            raise NotFoundException("payment", payment_id)
        return payment

    async def create_payment(self, data: CreatePaymentRequest) -> PaymentOut:
        """创建 new 状态的支付"""
        async with self._uow_factory() as uow:
            if data.payment_method_id is not None:
                method = await uow.payment_method_repository.get_by_id(data.payment_method_id)
                if method is None:
                    raise NotFoundException("payment_method", data.payment_method_id)
            payment = await uow.payment_repository.create(Payment(
                id=None,
                order_id=data.order_id,
                amount=data.amount,
                currency=data.currency,
                payment_method_id=data.payment_method_id,
            ))
            return PaymentOut.model_validate(payment)

    async def get_payment(self, payment_id: int) -> PaymentOut:
        async with self._uow_factory(readonly=True) as uow:
            payment = await uow.payment_repository.get_by_id(payment_id)
            if payment is None:
                raise NotFoundException("payment", payment_id)
            return PaymentOut.model_validate(payment)

    async def authorize(self, payment_id: int, data: AuthorizeRequest) -> PaymentOut:
        """授权；capture=True 时在独立事务中继续扣款，扣款失败不回滚已提交的授权"""
        async with self._uow_factory() as uow:
            payment = await self._lock_payment(uow, payment_id)
            await self._state_machine(uow).authorize(payment, data.card)
        if not data.capture:
            return PaymentOut.model_validate(payment)
        return await self.capture(payment_id, CaptureRequest())

    async def capture(self, payment_id: int, data: CaptureRequest) -> PaymentOut:
        async with self._uow_factory() as uow:
            payment = await self._lock_payment(uow, payment_id)
            await self._state_machine(uow).capture(payment, data.amount)
            return PaymentOut.model_validate(payment)

    async def void(self, payment_id: int) -> PaymentOut:
        async with self._uow_factory() as uow:
            payment = await self._lock_payment(uow, payment_id)
            await self._state_machine(uow).void(payment)
            return PaymentOut.model_validate(payment)

    async def refund(self, payment_id: int, data: RefundRequest) -> PaymentOut:
        async with self._uow_factory() as uow:
            payment = await self._lock_payment(uow, payment_id)
            await self._state_machine(uow).refund(payment, data.amount, data.card)
            return PaymentOut.model_validate(payment)

    async def create_payment_method(self, data: CreatePaymentMethodRequest) -> PaymentMethodOut:
        async with self._uow_factory() as uow:
            method = await self._state_machine(uow).create_payment_method(data.card)
            return PaymentMethodOut.model_validate(method)

    async def delete_payment_method(self, method_id: int) -> None:
        async with self._uow_factory() as uow:
            await self._state_machine(uow).delete_payment_method(PaymentMethod(id=method_id))
