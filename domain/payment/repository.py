"""
支付仓储接口 - 定义支付数据访问的抽象接口
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entity import Payment, PaymentMethod


class PaymentRepository(ABC):
    """支付仓储抽象接口 - 只定义能做什么，不管怎么做"""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """创建支付记录"""
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        """根据ID获取支付"""
        pass

    @abstractmethod
    async def get_for_update(self, payment_id: int) -> Optional[Payment]:
        """根据ID获取支付并加行锁，保证同一笔支付的操作串行执行"""
        pass

    @abstractmethod
    async def get_by_order_id(self, order_id: str) -> Optional[Payment]:
        """根据订单ID获取支付"""
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        """更新支付记录（状态、金额、渠道交易ID、已退款金额）"""
        pass


class PaymentMethodRepository(ABC):
    """支付方式仓储抽象接口"""

    @abstractmethod
    async def create(self, method: PaymentMethod) -> PaymentMethod:
        """创建支付方式"""
        pass

    @abstractmethod
    async def get_by_id(self, method_id: int) -> Optional[PaymentMethod]:
        """根据ID获取支付方式"""
        pass

    @abstractmethod
    async def delete(self, method_id: int) -> bool:
        """删除支付方式"""
        pass
