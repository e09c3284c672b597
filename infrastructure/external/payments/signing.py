"""
Paycom request/response fingerprints.

The processor authenticates messages with an MD5 digest over `|`-joined fields
followed by the shared key. Field order is part of the protocol, so each message
kind pins it in a named constant instead of building the list ad hoc.
"""
from __future__ import annotations

import hashlib
import hmac
from typing import Any, Iterable, Mapping, Sequence

SEPARATOR = "|"

# v1 field orders; the shared key is always appended last
REQUEST_HASH_FIELDS: tuple[str, ...] = ("orderid", "amount", "time")
RESPONSE_HASH_FIELDS: tuple[str, ...] = (
    "orderid",
    "amount",
    "response",
    "transactionid",
    "avsresponse",
    "cvvresponse",
    "time",
)


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


def sign(fields: Iterable[Any], secret: str) -> str:
    """Return the hex digest of ``field1|field2|...|secret``."""
    parts = [_stringify(v) for v in fields]
    parts.append(secret)
    return hashlib.md5(SEPARATOR.join(parts).encode("utf-8")).hexdigest()


def verify(fields: Iterable[Any], secret: str, candidate: str | None) -> bool:
    if not candidate:
        return False
    return hmac.compare_digest(sign(fields, secret), candidate.lower())


def pick(values: Mapping[str, Any], field_names: Sequence[str]) -> list[str]:
    """Values of `field_names` in order; missing keys become empty strings."""
    return [_stringify(values.get(name)) for name in field_names]


def sign_fields(values: Mapping[str, Any], field_names: Sequence[str], secret: str) -> str:
    return sign(pick(values, field_names), secret)
