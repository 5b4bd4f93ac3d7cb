"""
Cross-node replication.

Both nodes accept idempotent upsert batches. Only the secondary pushes, and
only while its latest probe of the primary succeeded. Conflicts are resolved
by arrival order (last write wins); there is no version tracking.
"""

import logging
from datetime import datetime
from typing import Optional, List, Dict, Any
import httpx

from privatediary.core.config import NodeRole
from privatediary.db.repositories.diary_repository import DiaryRepository
from privatediary.db.repositories.session_repository import SessionRepository
from privatediary.models.diary_entry import DiaryEntry
from privatediary.models.login_activity import LoginActivity
from privatediary.models.base import utcnow
from privatediary.schemas.sync import DiaryEntryPayload, SessionPayload
from .health_monitor import HealthMonitor
from .exceptions import SyncFailure, StoreUnavailable

logger = logging.getLogger(__name__)

NODE_TOKEN_HEADER = "X-Node-Token"


class ReplicationEngine:
    """Ingests peer batches and pushes this node's recent records to the peer"""

    def __init__(
        self,
        role: NodeRole,
        peer_url: str,
        health_monitor: HealthMonitor,
        batch_size: int = 50,
        backup_limit: int = 100,
        timeout: float = 10,
        shared_secret: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        diary_repository=DiaryRepository,
        session_repository=SessionRepository
    ):
        self.role = role
        self.peer_url = peer_url.rstrip("/")
        self.health_monitor = health_monitor
        self.batch_size = batch_size
        self.backup_limit = backup_limit
        self.timeout = timeout
        self.shared_secret = shared_secret
        self._client = client
        self._owns_client = client is None
        self.diary_repository = diary_repository
        self.session_repository = session_repository
        self.last_sync_at: Optional[datetime] = None
        self.last_sync_error: Optional[str] = None

    # Ingest

    async def upsert_diary_batch(self, entries: List[DiaryEntry]) -> int:
        synced = await self.diary_repository.upsert_many(entries)
        logger.info(f"Upserted {synced} diary entries from peer")
        return synced

    async def upsert_session_batch(self, sessions: List[LoginActivity]) -> int:
        synced = await self.session_repository.upsert_many(sessions)
        logger.info(f"Upserted {synced} login activity records from peer")
        return synced

    async def pull_backup_data(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """Read-only snapshot for manual recovery of a promoted node"""
        limit = min(limit or self.backup_limit, self.backup_limit)
        return {
            "diary_entries": await self.diary_repository.get_recent(limit),
            "sessions": await self.session_repository.get_recent(limit)
        }

    # Push

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.peer_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"}
            )
        return self._client

    async def close(self):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        if self.shared_secret:
            return {NODE_TOKEN_HEADER: self.shared_secret}
        return {}

    async def _post(self, path: str, payload: Dict[str, Any]) -> int:
        try:
            response = await self._get_client().post(
                f"{self.peer_url}{path}",
                json=payload,
                headers=self._headers()
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SyncFailure(f"POST {path} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise SyncFailure(f"POST {path} returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise SyncFailure(f"POST {path} returned a non-object payload")
        return payload.get("synced", 0)

    async def push_to_peer(self) -> bool:
        """Run one sync cycle. Failures are logged; the next cycle is the retry."""
        if not self.role.pushes_to_peer:
            return False

        if not self.health_monitor.peer_available:
            logger.info("Skipping sync: peer not healthy on last probe")
            return False

        try:
            entries = await self.diary_repository.get_recent(self.batch_size)
            sessions = await self.session_repository.get_recent(self.batch_size)

            diary_synced = await self._post("/api/sync-diary", {
                "entries": [DiaryEntryPayload.from_model(e).model_dump(mode="json") for e in entries]
            })
            session_synced = await self._post("/api/sync-activity", {
                "activities": [SessionPayload.from_model(s).model_dump(mode="json") for s in sessions]
            })
        except (SyncFailure, StoreUnavailable) as e:
            self.last_sync_error = str(e)
            logger.warning(f"Sync with peer failed: {e}")
            return False

        self.last_sync_at = utcnow()
        self.last_sync_error = None
        logger.info(f"Synced {diary_synced} diary entries and {session_synced} sessions with peer")
        return True
