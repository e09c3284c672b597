"""
API依赖项 - 支付网关与应用服务装配
"""
from functools import lru_cache

from fastapi import Depends

from application.ports.payment_gateway import PaymentGateway
from application.services.payment_operations import PaymentOperationsService
from infrastructure.external.payments import get_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


@lru_cache(maxsize=1)
def get_gateway() -> PaymentGateway:
    """进程内共享的支付网关客户端（复用 httpx 连接池）"""
    return get_payment_gateway()


async def get_payment_operations(
    gateway: PaymentGateway = Depends(get_gateway),
) -> PaymentOperationsService:
    return PaymentOperationsService(uow_factory=SQLAlchemyUnitOfWork, gateway=gateway)
