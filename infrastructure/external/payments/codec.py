"""
Wire codec for the Paycom endpoint.

Requests go out as a regular form-encoded body. Responses come back as a single
sentinel byte followed by ``key=value`` pairs joined with ``&``.
"""
from __future__ import annotations

from typing import Mapping
from urllib.parse import parse_qsl, urlencode

from infrastructure.external.payments.exceptions import InvalidResponseError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_MASKED = "***"


def encode_request(params: Mapping[str, object]) -> bytes:
    """Form-encode `params`, preserving key order."""
    return urlencode([(k, "" if v is None else str(v)) for k, v in params.items()]).encode("utf-8")


def decode_response(body: bytes) -> dict[str, str]:
    """Decode a response body into a mapping.

    A pair without ``=`` yields an empty value. Only a body with no
    recoverable pair at all is rejected.
    """
    if not body:
        raise InvalidResponseError("Empty response body")
    text = body[1:].decode("utf-8", errors="replace")
    pairs = [(k, v) for k, v in parse_qsl(text, keep_blank_values=True) if k]
    if not pairs:
        raise InvalidResponseError("Response body has no key/value pairs", details={"length": len(body)})
    return dict(pairs)


def redact(params: Mapping[str, object]) -> dict[str, object]:
    """Copy of `params` that is safe to log."""
    safe = dict(params)
    number = safe.get("ccnumber")
    if isinstance(number, str) and len(number) > 4:
        safe["ccnumber"] = "*" * (len(number) - 4) + number[-4:]
    for key in ("cvv", "hash"):
        if safe.get(key):
            safe[key] = _MASKED
    return safe
