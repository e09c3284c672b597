"""
Payment domain events.

Dataclass events record payment lifecycle facts for downstream handling
(e.g., messaging, audit). Domain remains free of infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid


@dataclass
class PaymentEvent:
    order_id: str
    payment_id: Optional[int] = None
    remote_id: Optional[str] = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class PaymentAuthorized(PaymentEvent):
    amount: str = ""


@dataclass
class PaymentCaptured(PaymentEvent):
    amount: str = ""


@dataclass
class PaymentVoided(PaymentEvent):
    pass


@dataclass
class PaymentRefunded(PaymentEvent):
    amount: str = ""
    refunded_total: str = ""
