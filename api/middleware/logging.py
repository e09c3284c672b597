"""
请求/响应日志中间件
记录所有HTTP请求和响应的耗时统计

请求体可能包含完整卡号与 CVV，因此从不记录请求体。
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging_config import get_logger


logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    日志记录中间件

    功能：
    1. 记录请求信息（方法、路径、查询参数）
    2. 记录响应信息（状态码、耗时）
    3. 记录未处理异常
    """

    # 跳过日志的路径
    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
        }
        logger.info("request_started", **request_info)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=round(time.perf_counter() - start_time, 4),
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
                **request_info,
            )
            # 重新抛出异常，让异常处理器处理
            raise

        duration = time.perf_counter() - start_time
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration=round(duration, 4),
            **request_info,
        )
        # 在响应头中添加处理时间
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response
