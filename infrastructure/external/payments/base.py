"""
Base payment client implementing shared concerns: http transport, timeouts, logging.

Exactly one POST per call and no retry: `sale` and `refound` are not idempotent,
so resending after a timeout could charge the card twice. Callers that want
retries must own that policy.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from core.logging_config import get_logger
from infrastructure.external.payments.codec import (
    FORM_CONTENT_TYPE,
    decode_response,
    encode_request,
    redact,
)
from infrastructure.external.payments.exceptions import TransportError


logger = get_logger(__name__)


class BasePaymentClient:
    provider: str = "base"

    def __init__(
        self,
        *,
        timeouts: Optional[dict[str, float]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._timeouts_cfg = timeouts or {"connect": 5.0, "read": 5.0, "write": 5.0, "total": 5.0}
        self._client: Optional[httpx.AsyncClient] = http_client

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeouts)
        return self._client

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def post(
        self,
        url: str,
        params: Mapping[str, Any],
        timeout: Optional[float] = None,
    ) -> dict[str, str]:
        """POST `params` form-encoded to `url` and return the decoded body."""
        self._log("paycom_request", url=url, params=redact(params))
        try:
            response = await self.client.post(
                url,
                content=encode_request(params),
                headers={"Content-Type": FORM_CONTENT_TYPE},
                timeout=self.timeouts if timeout is None else timeout,
            )
        except httpx.TimeoutException as exc:
            logger.error("paycom_transport_timeout", provider=self.provider, url=url, error=str(exc))
            raise TransportError(f"Request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("paycom_transport_failed", provider=self.provider, url=url, error=str(exc))
            raise TransportError(f"Request failed: {exc}") from exc

        if not response.is_success:
            logger.error("paycom_http_error", provider=self.provider, url=url, status_code=response.status_code)
            raise TransportError(
                f"Gateway returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        data = decode_response(response.content)
        self._log(
            "paycom_response",
            orderid=data.get("orderid"),
            response=data.get("response"),
            response_code=data.get("response_code"),
            transactionid=data.get("transactionid"),
        )
        return data

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
