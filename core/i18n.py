from __future__ import annotations

import gettext
from contextvars import ContextVar
from pathlib import Path
from typing import Optional

from core.logging_config import get_logger

_current_locale: ContextVar[str] = ContextVar("current_locale", default="en")
_translators: dict[str, gettext.NullTranslations] = {}
_logger = get_logger(__name__)

# English texts used when no catalog provides a translation
DEFAULT_MESSAGES: dict[str, str] = {
    "health.ok": "OK",
    "validation.failed": "Validation failed: {reason}",
    "validation.domain": "Invalid request data",
    "resource.not_found": "{resource} not found",
    "error.internal": "Internal server error",
    "payments.error.declined": "The payment could not be processed. Please verify your card details and try again.",
    "payments.error.retry_later": "The payment could not be processed right now. Please try again later.",
    "payments.state.invalid": "The operation is not allowed in the current payment state",
    "payments.refund.amount_invalid": "The refund amount exceeds the refundable balance",
    "payments.order.exists": "A payment already exists for this order",
}


def set_locale(locale: str) -> None:
    """Set current request locale (fallback to 'en')."""
    _current_locale.set(locale or "en")


def get_locale() -> str:
    """Get current request locale (default 'en')."""
    return _current_locale.get()


def _get_translator(locale: str) -> gettext.NullTranslations:
    tr = _translators.get(locale)
    if tr is not None:
        return tr
    localedir = Path(__file__).resolve().parent.parent / "locales"
    # fallback=True yields NullTranslations when no catalog exists
    tr = gettext.translation(
        domain="messages",
        localedir=str(localedir),
        languages=[locale],
        fallback=True,
    )
    _translators[locale] = tr
    return tr


def t(msgid: str, default: Optional[str] = None, **params) -> str:
    """Translate msgid using current locale and format with params.

    Lookup order: locale catalog, then DEFAULT_MESSAGES, then `default`,
    then the msgid itself.
    """
    text = _get_translator(get_locale()).gettext(msgid)
    if text == msgid:
        text = DEFAULT_MESSAGES.get(msgid, default if default is not None else msgid)
    if not params:
        return text
    try:
        return text.format(**params)
    except (KeyError, IndexError, ValueError) as exc:
        _logger.warning("i18n_format_failed", msgid=msgid, params=list(params.keys()), error=str(exc))
        return text
