import logging
from datetime import datetime, timedelta
from typing import Optional

from privatediary.db.repositories.user_repository import UserRepository
from privatediary.models.user import User
from privatediary.models.base import utcnow

logger = logging.getLogger(__name__)

# Fixed policy constant, not configurable per user
LOCKOUT_DURATION = timedelta(minutes=15)


class LockoutPolicy:
    """Decides emergency lock transitions from login outcomes"""

    def __init__(self, user_repository=UserRepository):
        self.user_repository = user_repository

    def is_locked(self, user: User, now: Optional[datetime] = None) -> bool:
        return user.is_locked(now or utcnow())

    async def trigger_lockout(self, user: User, now: Optional[datetime] = None) -> datetime:
        """Lock the account for LOCKOUT_DURATION from now.

        Any existing lock is overwritten, so a trigger during an active lock
        restarts the window instead of extending it.
        """
        until = (now or utcnow()) + LOCKOUT_DURATION
        await self.user_repository.set_emergency_lock(user.id, until)
        user.emergency_lock_until = until
        logger.warning(f"Emergency lock for user {user.username} until {until.isoformat()}")
        return until
