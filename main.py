"""
FastAPI应用主入口
"""
from fastapi import FastAPI
from contextlib import asynccontextmanager

from api.routes import payments as payments_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware, LocaleMiddleware
from api.dependencies import get_gateway
from core.config import settings
from core.exceptions import register_exception_handlers
from core.response import success_response
from core.i18n import t
from core.logging_config import get_logger, configure_logging
from infrastructure.database import create_tables, engine


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时创建数据库表（仅开发环境）
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")

    yield

    # 关闭时释放网关连接池（仅在已创建时）
    if get_gateway.cache_info().currsize:
        await get_gateway().aclose()
        get_gateway.cache_clear()
    await engine.dispose()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Paycom (Credomatic) card payments: authorize, capture, void, refund",
)

# 添加中间件（注意顺序：后添加的先执行）
# 1. 语言中间件（解析 locale）
app.add_middleware(LocaleMiddleware)

# 2. 日志中间件（依赖request_id）
app.add_middleware(LoggingMiddleware)

# 3. Request ID中间件（最先执行，为后续中间件提供request_id）
app.add_middleware(RequestIDMiddleware)

# 注册全局异常处理器
register_exception_handlers(app)


# 注册路由
app.include_router(payments_routes.router, prefix="/api/v1")
app.include_router(payments_routes.methods_router, prefix="/api/v1")


# 健康检查
@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    return success_response(data={"status": "healthy"}, message=t("health.ok"))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
