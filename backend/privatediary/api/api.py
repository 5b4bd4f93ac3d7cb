from fastapi import APIRouter

from privatediary.api.routes import (
    health_router,
    auth_router,
    security_router,
    activity_router,
    diary_router,
    sync_router,
    recovery_router,
    telegram_router
)
from privatediary.core.config import NodeRole


def build_api_router(role: NodeRole, prefix: str = "/api") -> APIRouter:
    """Create the API router for a node role"""
    api_router = APIRouter(prefix=prefix)

    # Routes shared by both roles
    api_router.include_router(health_router)
    api_router.include_router(auth_router)
    api_router.include_router(security_router)
    api_router.include_router(activity_router)
    api_router.include_router(diary_router)
    api_router.include_router(sync_router)
    api_router.include_router(telegram_router)

    if role.exposes_recovery:
        api_router.include_router(recovery_router)

    return api_router
