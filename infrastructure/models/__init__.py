"""Infrastructure models package exports."""
from .base import Base, metadata
from .payment import PaymentModel, PaymentMethodModel

__all__ = [
    "Base",
    "metadata",
    "PaymentModel",
    "PaymentMethodModel",
]
