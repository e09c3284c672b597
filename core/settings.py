"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Gateway credentials are read once at start-up and treated as read-only.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


PAYCOM_DEFAULT_URL = "https://paycom.credomatic.com/PayComBackEndWeb/common/requestPaycomService.go"


class PaymentTimeouts(BaseModel):
    # seconds per phase; 5 s is the processor's reference budget
    connect: float = 5.0
    read: float = 5.0
    write: float = 5.0
    total: float = 5.0


class PaycomSettings(BaseModel):
    username: Optional[str] = None
    key: Optional[str] = None  # shared secret used for request/response hashes
    key_id: Optional[str] = None
    processor_id: str = ""
    url: str = PAYCOM_DEFAULT_URL


class PaymentSettings(BaseSettings):
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    paycom: PaycomSettings = Field(default_factory=PaycomSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
