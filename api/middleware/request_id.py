"""
Request ID 中间件

透传或生成 X-Request-ID，写入 request.state（供异常处理器回填响应体），
并绑定到 structlog 上下文，使同一请求内的支付日志可按 request_id 串联。
"""
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


class RequestIDMiddleware(BaseHTTPMiddleware):
    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            client_ip=_client_ip(request),
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers[self.HEADER_NAME] = request_id
        return response


def _client_ip(request: Request) -> str:
    # 代理链取最左侧的原始客户端
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")
