"""
Telegram bot integration: outbound messages and read-only chat commands
"""

import logging
from typing import Optional, Any
import httpx

from privatediary.db.repositories.diary_repository import DiaryRepository
from privatediary.db.repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "🤖 Private Diary Bot\n\n"
    "Commands:\n"
    "/entries - View recent diary entries\n"
    "/activity - Check login activity\n"
    "/status - Check service status"
)

UNKNOWN_COMMAND_TEXT = "Unknown command. Use /start to see available commands."


class TelegramClient:
    """Thin client for the Telegram Bot API sendMessage call"""

    def __init__(
        self,
        bot_token: Optional[str],
        api_url: str = "https://api.telegram.org",
        timeout: float = 10,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.bot_token = bot_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def close(self):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send_message(self, chat_id: str, text: str) -> bool:
        """Send a message; failures are logged and reported as False"""
        if not self.enabled:
            logger.debug("Telegram bot token not configured, dropping message")
            return False

        try:
            response = await self._get_client().post(
                f"{self.api_url}/bot{self.bot_token}/sendMessage",
                json={"chat_id": chat_id, "text": text}
            )
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.error(f"Send Telegram message error: {e}")
            return False


class ChatCommandHandler:
    """Formats read-only summaries for chat commands"""

    def __init__(
        self,
        telegram: TelegramClient,
        diary_repository=DiaryRepository,
        session_repository=SessionRepository
    ):
        self.telegram = telegram
        self.diary_repository = diary_repository
        self.session_repository = session_repository

    async def render(self, command: str) -> str:
        if command == "/start":
            return HELP_TEXT

        if command == "/entries":
            entries = await self.diary_repository.get_recent(5)
            if not entries:
                return "No diary entries found."
            lines = [f"• {e.title} ({e.date.strftime('%Y-%m-%d')})" for e in entries]
            return "📝 Recent Diary Entries:\n\n" + "\n".join(lines)

        if command == "/activity":
            activities = await self.session_repository.get_recent(5)
            if not activities:
                return "No login activity found."
            lines = []
            for activity in activities:
                status = "🟢 Active" if activity.is_active else "🔴 Inactive"
                time = activity.login_time.strftime("%Y-%m-%d %H:%M UTC")
                lines.append(f"• {activity.device_name} - {activity.ip}\n  {time} {status}")
            return "🔐 Recent Login Activity:\n\n" + "\n".join(lines)

        if command == "/status":
            diary_count = await self.diary_repository.count()
            activity_count = await self.session_repository.count()
            active_devices = await self.session_repository.count(active_only=True)
            return (
                "📊 Service Status:\n\n"
                f"Diary Entries: {diary_count}\n"
                f"Login Records: {activity_count}\n"
                f"Active Devices: {active_devices}\n"
                "Backend: 🟢 Running"
            )

        return UNKNOWN_COMMAND_TEXT

    async def handle_update(self, update: Any) -> Optional[str]:
        """Handle a webhook update. Returns the reply text, or None if ignored."""
        message = update.get("message") if isinstance(update, dict) else None
        if not isinstance(message, dict):
            return None

        text = message.get("text")
        chat = message.get("chat")
        chat_id = chat.get("id") if isinstance(chat, dict) else None

        if not isinstance(text, str) or chat_id is None or not text.startswith("/"):
            return None

        command = text.lower().split(" ")[0]
        reply = await self.render(command)
        await self.telegram.send_message(str(chat_id), reply)
        return reply
