import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from archiver.api import api_router
from archiver.core.config import settings
from archiver.core.exceptions import (
    CategoryDeleteError, CategoryHierarchyError, RecordValidationError
)
from archiver.db.session import create_db_engine, create_session_factory, init_db, dispose_engine

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain errors into HTTP responses."""

    @app.exception_handler(RecordValidationError)
    async def record_validation_handler(request: Request, exc: RecordValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "detail": str(exc),
                "errors": [error.model_dump() for error in exc.errors],
            },
        )

    @app.exception_handler(CategoryDeleteError)
    async def category_delete_handler(request: Request, exc: CategoryDeleteError):
        return JSONResponse(status_code=409, content={"detail": exc.reason})

    @app.exception_handler(CategoryHierarchyError)
    async def category_hierarchy_handler(request: Request, exc: CategoryHierarchyError):
        return JSONResponse(status_code=400, content={"detail": exc.reason})

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return JSONResponse(status_code=409, content={"detail": "Duplicate or conflicting record"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # 未匹配的路由使用统一的提示
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content={"detail": f"Can't find {request.url.path} on this server!"},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """
    创建应用实例

    数据库引擎在启动事件中创建并保存在 app.state 中，关闭时释放
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Set up CORS
    logger.info(f"配置CORS：{'允许所有来源' if '*' in settings.cors_origins else f'允许来源: {settings.cors_origins}'}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")
    register_exception_handlers(app)

    @app.on_event("startup")
    def startup_event():
        """应用启动时执行的事件处理器"""
        logger.info("应用启动，初始化数据库连接...")
        engine = create_db_engine(database_url or settings.DATABASE_URL)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        app.state.started_at = time.time()
        if settings.AUTO_CREATE_TABLES:
            init_db(engine)

    @app.on_event("shutdown")
    def shutdown_event():
        """应用关闭时执行的事件处理器"""
        logger.info("应用关闭，清理资源...")
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            dispose_engine(engine)
        app.state.engine = None
        app.state.session_factory = None

    @app.get("/api-info", include_in_schema=True)
    def api_info():
        """返回API信息和链接"""
        return {
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": settings.APP_VERSION,
            "api_docs": "/api/docs",
            "health": "/api/health",
        }

    # 根级别的健康检查API
    @app.get("/health")
    def root_health():
        """
        根级别的健康检查端点
        只返回服务状态，不访问数据库
        """
        started_at = getattr(app.state, "started_at", None)
        return {
            "status": "ok",
            "version": settings.APP_VERSION,
            "uptime": round(time.time() - started_at, 3) if started_at else 0,
        }

    return app
