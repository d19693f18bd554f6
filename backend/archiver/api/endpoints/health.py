import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from archiver.api import deps
from archiver.core.config import settings

# 创建路由器
router = APIRouter()

# 获取日志记录器
logger = logging.getLogger(__name__)


@router.get("", response_model=Dict[str, Any])
def health_check(db: Session = Depends(deps.get_db)):
    """
    API健康状态检查
    检查API服务器和数据库连接是否正常
    """
    health_data = {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.APP_VERSION,
        "api": {
            "status": "ok"
        },
        "database": {
            "status": "checking"
        },
    }

    # 检查数据库连接
    try:
        db.execute(text("SELECT 1"))
        health_data["database"]["status"] = "ok"
    except SQLAlchemyError as e:
        health_data["database"]["status"] = "error"
        health_data["database"]["error"] = str(e)
        health_data["status"] = "unhealthy"
        logger.error(f"数据库健康检查失败: {str(e)}")

    return health_data
