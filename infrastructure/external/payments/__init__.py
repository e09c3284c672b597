"""
Factory for the payment gateway client.
"""
from __future__ import annotations

from typing import Optional

import httpx

from core.settings import PaymentSettings, payment_settings
from application.ports.payment_gateway import PaymentGateway


def get_payment_gateway(
    settings: Optional[PaymentSettings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> PaymentGateway:
    from .builders import PaycomCredentials
    from .paycom_client import PaycomClient

    cfg = (settings or payment_settings).paycom
    if not (cfg.username and cfg.key and cfg.key_id):
        raise RuntimeError("PAYCOM configuration incomplete (username, key and key_id are required)")
    credentials = PaycomCredentials(
        username=cfg.username,
        key=cfg.key,
        key_id=cfg.key_id,
        processor_id=cfg.processor_id,
    )
    return PaycomClient(
        credentials,
        cfg.url,
        timeouts=(settings or payment_settings).timeouts.model_dump(),
        http_client=http_client,
    )
