import logging
from datetime import datetime, timedelta, timezone, date
from typing import Optional

from privatediary.db.repositories.user_repository import UserRepository
from privatediary.models.base import utcnow
from .telegram import TelegramClient

logger = logging.getLogger(__name__)

REMINDER_TEXT = "⏰ 10:00 PM Assam Time - Time to write your daily diary entry!"


class ReminderService:
    """Daily diary reminder sent to users who allowed notifications"""

    def __init__(
        self,
        telegram: TelegramClient,
        hour: int = 22,
        minute: int = 0,
        utc_offset_minutes: int = 330,
        user_repository=UserRepository
    ):
        self.telegram = telegram
        self.hour = hour
        self.minute = minute
        self.tz = timezone(timedelta(minutes=utc_offset_minutes))
        self.user_repository = user_repository
        self.last_sent_on: Optional[date] = None

    def is_due(self, now: datetime) -> bool:
        local = now.astimezone(self.tz)
        return (
            local.hour == self.hour
            and local.minute == self.minute
            and self.last_sent_on != local.date()
        )

    async def run_once(self, now: Optional[datetime] = None) -> int:
        """Send reminders if due. Returns the number of messages sent."""
        now = now or utcnow()
        if not self.is_due(now):
            return 0

        self.last_sent_on = now.astimezone(self.tz).date()
        users = await self.user_repository.get_notifiable()

        sent = 0
        for user in users:
            if await self.telegram.send_message(user.telegram_chat_id, REMINDER_TEXT):
                sent += 1

        logger.info(f"Daily reminder sent to {sent} of {len(users)} user(s)")
        return sent
