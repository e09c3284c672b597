import pytest

from core.settings import PAYCOM_DEFAULT_URL, PaymentSettings
from infrastructure.database import _build_async_url


def test_payment_settings_read_nested_env(monkeypatch):
    monkeypatch.setenv("PAYCOM__USERNAME", "merchant")
    monkeypatch.setenv("PAYCOM__KEY", "shh")
    monkeypatch.setenv("PAYCOM__KEY_ID", "42")
    monkeypatch.setenv("TIMEOUTS__TOTAL", "2.5")

    cfg = PaymentSettings()

    assert cfg.paycom.username == "merchant"
    assert cfg.paycom.key == "shh"
    assert cfg.paycom.key_id == "42"
    assert cfg.paycom.url == PAYCOM_DEFAULT_URL
    assert cfg.timeouts.total == 2.5


def test_sync_database_url_is_upgraded_to_async_driver():
    assert _build_async_url("sqlite:///./paycom.db") == "sqlite+aiosqlite:///./paycom.db"
    assert _build_async_url("sqlite+aiosqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"


def test_unknown_database_driver_is_rejected():
    with pytest.raises(ValueError):
        _build_async_url("oracle://db/payments")
