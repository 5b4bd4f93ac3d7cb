from .health import router as health_router
from .auth import router as auth_router
from .security import router as security_router
from .activity import router as activity_router
from .diary import router as diary_router
from .sync import router as sync_router, recovery_router
from .telegram import router as telegram_router

__all__ = [
    "health_router",
    "auth_router",
    "security_router",
    "activity_router",
    "diary_router",
    "sync_router",
    "recovery_router",
    "telegram_router"
]
