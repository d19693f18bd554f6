from fastapi import APIRouter

# 先定义路由器
api_router = APIRouter()

from archiver.api.endpoints import (  # noqa: E402
    auth,
    users,
    categories,
    articles,
    health
)

# 注册路由
api_router.include_router(health.router, prefix="/health", tags=["system"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(articles.router, prefix="/articles", tags=["articles"])
