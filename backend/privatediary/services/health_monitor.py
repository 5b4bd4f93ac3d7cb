"""
Peer liveness probing. Results are advisory: they gate the secondary's
sync push and nothing else.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any
import httpx

from privatediary.models.base import utcnow
from .exceptions import PeerUnreachable

logger = logging.getLogger(__name__)


@dataclass
class PeerStatus:
    ok: bool
    checked_at: datetime
    peer_role: Optional[str] = None
    error: Optional[str] = None
    consecutive_failures: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "checked_at": self.checked_at.isoformat(),
            "peer_role": self.peer_role,
            "error": self.error,
            "consecutive_failures": self.consecutive_failures
        }


class HealthMonitor:
    """Polls the peer node's health endpoint"""

    def __init__(
        self,
        peer_url: str,
        health_path: str = "/api/health",
        timeout: float = 10,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.peer_url = peer_url.rstrip("/")
        self.health_path = health_path
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self.last_status: Optional[PeerStatus] = None

    @property
    def peer_available(self) -> bool:
        """Outcome of the latest probe; False before the first one"""
        return self.last_status is not None and self.last_status.ok

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.peer_url,
                timeout=httpx.Timeout(self.timeout)
            )
        return self._client

    async def close(self):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _fetch_health(self) -> Dict[str, Any]:
        try:
            response = await self._get_client().get(f"{self.peer_url}{self.health_path}")
        except httpx.HTTPError as e:
            raise PeerUnreachable(f"Cannot reach peer at {self.peer_url}: {e}") from e

        if response.status_code != 200:
            raise PeerUnreachable(f"Peer health returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise PeerUnreachable(f"Peer health returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise PeerUnreachable("Peer health returned a non-object payload")
        return payload

    async def probe(self) -> PeerStatus:
        """Probe the peer once and record the outcome. Never raises."""
        failures = self.last_status.consecutive_failures if self.last_status else 0

        try:
            payload = await self._fetch_health()
            status = PeerStatus(
                ok=payload.get("status") == "healthy",
                checked_at=utcnow(),
                peer_role=payload.get("role"),
                error=None if payload.get("status") == "healthy" else f"peer reports {payload.get('status')}"
            )
        except PeerUnreachable as e:
            status = PeerStatus(ok=False, checked_at=utcnow(), error=str(e))

        if status.ok:
            if failures:
                logger.info(f"Peer {self.peer_url} is reachable again after {failures} failed probe(s)")
        else:
            status.consecutive_failures = failures + 1
            logger.warning(f"Peer {self.peer_url} is down: {status.error}")

        self.last_status = status
        return status
