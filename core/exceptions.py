"""
自定义异常映射与全局异常处理器
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import traceback
import uuid
from starlette import status as http_status

from .response import error_response
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException
from infrastructure.external.payments.exceptions import (
    DeclineError,
    AuthenticationError,
    PaymentGatewayError,
)
from core.i18n import t, get_locale


_STATUS_BY_CODE = {
    BusinessCode.PARAM_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.PARAM_MISSING: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.PARAM_TYPE_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.PARAM_VALIDATION_ERROR: http_status.HTTP_422_UNPROCESSABLE_ENTITY,

    BusinessCode.BUSINESS_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,

    BusinessCode.SYSTEM_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.DATABASE_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.NETWORK_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.SERVICE_UNAVAILABLE: http_status.HTTP_503_SERVICE_UNAVAILABLE,

    PaymentCode.DECLINED: http_status.HTTP_402_PAYMENT_REQUIRED,
    PaymentCode.AUTHENTICATION_FAILED: http_status.HTTP_402_PAYMENT_REQUIRED,
    PaymentCode.INVALID_RESPONSE: http_status.HTTP_502_BAD_GATEWAY,
    PaymentCode.TRANSPORT_ERROR: http_status.HTTP_502_BAD_GATEWAY,
    PaymentCode.INVALID_STATE: http_status.HTTP_409_CONFLICT,
    PaymentCode.INVALID_REFUND_AMOUNT: http_status.HTTP_422_UNPROCESSABLE_ENTITY,
    PaymentCode.ALREADY_EXISTS: http_status.HTTP_409_CONFLICT,
}


def business_code_to_http_status(code: int) -> int:
    """根据业务码映射HTTP状态码（默认400）。"""
    return _STATUS_BY_CODE.get(code, http_status.HTTP_400_BAD_REQUEST)


def _request_id(request: Request) -> str:
    return getattr(getattr(request, "state", object()), "request_id", None) or str(uuid.uuid4())


def register_exception_handlers(app: FastAPI):
    """
    注册全局异常处理器

    Args:
        app: FastAPI应用实例
    """

    # logger
    logger = get_logger(__name__)

    @app.exception_handler(PaymentGatewayError)
    async def payment_gateway_exception_handler(request: Request, exc: PaymentGatewayError):
        """处理支付渠道异常：诊断信息只进日志，终端用户只看到通用提示"""
        request_id = _request_id(request)
        log = logger.warning if isinstance(exc, (DeclineError, AuthenticationError)) else logger.error
        log(
            "payment_gateway_error",
            request_id=request_id,
            error_type=exc.error_type,
            error=exc.message,
            details=exc.details,
        )
        response = error_response(
            code=exc.code,
            message=t(exc.message_key),
            error_type=exc.error_type,
            request_id=request_id,
            locale=get_locale(),
            message_key=exc.message_key,
        )
        return JSONResponse(
            status_code=business_code_to_http_status(exc.code),
            content=response.model_dump(mode='json'),
        )

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        """处理业务异常"""
        request_id = _request_id(request)
        # Render i18n message if message_key is provided, otherwise fallback to original message
        fmt_params = exc.format_params if isinstance(exc.format_params, dict) else {}
        translated = t(exc.message_key, default=exc.message, **fmt_params) if exc.message_key else exc.message
        response = error_response(
            code=exc.code,
            message=translated,
            error_type=exc.error_type,
            details=exc.details,
            field=exc.field,
            request_id=request_id,
            locale=get_locale(),
            message_key=exc.message_key,
        )
        return JSONResponse(
            status_code=business_code_to_http_status(exc.code),
            content=response.model_dump(mode='json'),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """处理参数验证异常"""
        request_id = _request_id(request)
        errors = exc.errors()

        # 提取第一个错误的详细信息
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", [])[1:])

        response = error_response(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=t("validation.failed", reason=first_error.get('msg', 'unknown')),
            error_type="ValidationError",
            # input values may carry card data
            details={"errors": [{"loc": e.get("loc"), "msg": e.get("msg"), "type": e.get("type")} for e in errors]},
            field=field,
            request_id=request_id,
            locale=get_locale(),
            message_key="validation.failed",
        )
        return JSONResponse(
            status_code=http_status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=response.model_dump(mode='json')
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """处理HTTP异常"""
        request_id = _request_id(request)

        # 映射HTTP状态码到业务码
        code_mapping = {
            404: BusinessCode.NOT_FOUND,
            500: BusinessCode.SYSTEM_ERROR,
            503: BusinessCode.SERVICE_UNAVAILABLE,
        }
        code = code_mapping.get(exc.status_code, BusinessCode.PARAM_ERROR if exc.status_code < 500 else BusinessCode.SYSTEM_ERROR)

        response = error_response(
            code=code,
            message=str(exc.detail),
            error_type="HTTPError",
            details={"status_code": exc.status_code},
            request_id=request_id,
            locale=get_locale(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(mode='json'),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """处理所有未捕获的异常"""
        request_id = _request_id(request)

        # 在开发环境可以返回详细错误信息
        details = None
        if app.debug:
            details = {
                "exception": str(exc),
                "traceback": traceback.format_exc()
            }

        response = error_response(
            code=BusinessCode.SYSTEM_ERROR,
            message=t("error.internal"),
            error_type="SystemError",
            details=details,
            request_id=request_id,
            locale=get_locale(),
            message_key="error.internal",
        )

        # 记录日志（使用结构化日志）
        logger.error(
            "unhandled_exception",
            request_id=request_id,
            error=str(exc),
            exc_info=True,
        )

        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode='json')
        )
