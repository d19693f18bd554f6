import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from archiver.db.base_class import Base

# 设置数据库日志
db_logger = logging.getLogger("sqlalchemy.engine")
logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """
    根据连接串创建数据库引擎

    引擎由进程入口（应用启动或CLI命令）创建并负责关闭，不在模块级别持有。
    """
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        # 内存数据库需要所有会话共享同一个连接
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                database_url,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        return create_engine(database_url, connect_args=connect_args)

    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=60,
        pool_recycle=600,  # 10分钟回收连接，避免长时间空闲连接
        pool_pre_ping=True,  # 使用前ping连接以确保有效
        echo=False,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """
    初始化数据库表结构，无需依赖迁移工具
    """
    # 导入模型以确保它们被注册
    import archiver.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


def dispose_engine(engine: Optional[Engine]) -> None:
    if engine is not None:
        engine.dispose()
        logger.info("Database engine disposed")
