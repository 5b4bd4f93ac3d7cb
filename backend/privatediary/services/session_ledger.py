import logging
from typing import List

from privatediary.db.repositories.session_repository import SessionRepository
from privatediary.models.login_activity import LoginActivity
from privatediary.models.base import utcnow

logger = logging.getLogger(__name__)


class SessionLedger:
    """Append/update log of per-device login sessions"""

    def __init__(self, repository=SessionRepository):
        self.repository = repository

    async def record_login(self, session: LoginActivity) -> LoginActivity:
        """Append a new record; existing records are never touched"""
        return await self.repository.create(session)

    async def close_device(self, device_id: str) -> int:
        """Mark every active session of the device as logged out"""
        closed = await self.repository.deactivate_device(device_id, utcnow())
        logger.info(f"Closed {closed} active session(s) for device {device_id}")
        return closed

    async def list_recent(self, user_id: str, limit: int = 20) -> List[LoginActivity]:
        return await self.repository.get_recent_for_user(user_id, limit)

    async def list_active(self, user_id: str) -> List[LoginActivity]:
        return await self.repository.get_active_for_user(user_id)

    async def list_device(self, user_id: str, device_id: str, limit: int = 20) -> List[LoginActivity]:
        """Login history of one of the user's devices"""
        sessions = await self.repository.get_by_device(device_id, user_id=user_id)
        return sessions[:limit]
