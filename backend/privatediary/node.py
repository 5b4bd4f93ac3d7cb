"""
A deployable diary node. Primary and secondary share every service and
differ only in sync direction and in the recovery endpoints they expose.
"""

import logging
from typing import Optional, Dict, Any
import httpx

from privatediary.core.config import Settings, NodeRole
from privatediary.db.database import Database, set_db, init_db
from privatediary.models.base import utcnow
from privatediary.services.access_control import AccessControlList, AccessPolicy
from privatediary.services.background_tasks import BackgroundTaskManager
from privatediary.services.credential_gate import CredentialGate
from privatediary.services.health_monitor import HealthMonitor
from privatediary.services.lockout_policy import LockoutPolicy
from privatediary.services.reminder_service import ReminderService
from privatediary.services.replication import ReplicationEngine
from privatediary.services.session_ledger import SessionLedger
from privatediary.services.session_manager import SessionManager
from privatediary.services.telegram import TelegramClient, ChatCommandHandler

logger = logging.getLogger(__name__)

HEALTH_JOB = "peer_health"
SYNC_JOB = "peer_sync"
REMINDER_JOB = "daily_reminder"
SESSION_CLEANUP_JOB = "session_cleanup"


class DiaryNode:
    """Service container for one node, built from settings at startup"""

    def __init__(
        self,
        settings: Settings,
        database: Optional[Database] = None,
        peer_client: Optional[httpx.AsyncClient] = None,
        telegram_client: Optional[httpx.AsyncClient] = None
    ):
        self.settings = settings
        self.role: NodeRole = settings.NODE_ROLE
        self.db = database or Database(settings.database_path)

        self.session_manager = SessionManager(settings.SESSION_DURATION_HOURS)
        self.lockout_policy = LockoutPolicy()
        self.session_ledger = SessionLedger()
        self.access_control = AccessControlList()
        self.access_policy = AccessPolicy(settings.BLOCK_LIST_MODE)
        self.credential_gate = CredentialGate(
            lockout_policy=self.lockout_policy,
            session_ledger=self.session_ledger,
            access_policy=self.access_policy,
            session_manager=self.session_manager
        )

        self.health_monitor = HealthMonitor(
            peer_url=settings.PEER_URL,
            health_path=f"{settings.API_PREFIX}/health",
            timeout=settings.PEER_TIMEOUT_SECONDS,
            client=peer_client
        )
        self.replication = ReplicationEngine(
            role=self.role,
            peer_url=settings.PEER_URL,
            health_monitor=self.health_monitor,
            batch_size=settings.SYNC_BATCH_SIZE,
            backup_limit=settings.BACKUP_PULL_LIMIT,
            timeout=settings.PEER_TIMEOUT_SECONDS,
            shared_secret=settings.NODE_SHARED_SECRET,
            client=peer_client
        )

        self.telegram = TelegramClient(
            bot_token=settings.TELEGRAM_BOT_TOKEN,
            api_url=settings.TELEGRAM_API_URL,
            client=telegram_client
        )
        self.chat_commands = ChatCommandHandler(self.telegram)
        self.reminders = ReminderService(
            self.telegram,
            hour=settings.REMINDER_HOUR,
            minute=settings.REMINDER_MINUTE,
            utc_offset_minutes=settings.REMINDER_UTC_OFFSET_MINUTES
        )

        self.scheduler = BackgroundTaskManager()
        self._register_jobs()

    def _register_jobs(self):
        self.scheduler.add_job(HEALTH_JOB, self.settings.health_check_interval, self.health_monitor.probe)

        if self.role.pushes_to_peer:
            # First push waits one interval so a probe result exists
            self.scheduler.add_job(
                SYNC_JOB,
                self.settings.SYNC_INTERVAL_SECONDS,
                self.replication.push_to_peer,
                run_immediately=False
            )

        self.scheduler.add_job(REMINDER_JOB, 60, self.reminders.run_once)
        self.scheduler.add_job(SESSION_CLEANUP_JOB, 3600, self._cleanup_sessions, run_immediately=False)

    async def _cleanup_sessions(self):
        expired = self.session_manager.cleanup_expired_sessions()
        if expired:
            logger.info(f"Removed {expired} expired session token(s)")

    async def start(self, run_jobs: bool = True):
        set_db(self.db)
        await init_db(self.db)
        if run_jobs:
            await self.scheduler.start()
        logger.info(f"{self.role.value.capitalize()} node started, peer at {self.settings.PEER_URL}")

    async def stop(self):
        await self.scheduler.stop()
        await self.health_monitor.close()
        await self.replication.close()
        await self.telegram.close()
        await self.db.disconnect()
        logger.info(f"{self.role.value.capitalize()} node stopped")

    async def health(self) -> Dict[str, Any]:
        store_connected = await self.db.ping()
        return {
            "status": "healthy" if store_connected else "unhealthy",
            "role": self.role.value,
            "timestamp": utcnow().isoformat(),
            "store_connected": store_connected
        }

    def status(self) -> Dict[str, Any]:
        """Operator view of peer, sync and job state"""
        peer = self.health_monitor.last_status
        return {
            "role": self.role.value,
            "peer_url": self.settings.PEER_URL,
            "peer": peer.to_dict() if peer else None,
            "last_sync_at": self.replication.last_sync_at.isoformat() if self.replication.last_sync_at else None,
            "last_sync_error": self.replication.last_sync_error,
            "jobs": self.scheduler.get_task_status()
        }
