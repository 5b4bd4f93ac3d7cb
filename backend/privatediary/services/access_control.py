"""
Per-user block lists and the block-list check run on every login attempt
"""
import logging
from dataclasses import dataclass
from typing import Optional, Dict, List

from privatediary.core.config import BlockListMode
from privatediary.db.repositories.user_repository import UserRepository
from privatediary.models.user import User
from .exceptions import AccessBlocked

logger = logging.getLogger(__name__)


@dataclass
class DeviceInfo:
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    ip: Optional[str] = None


class AccessControlList:
    """Idempotent set operations on a user's blocked IPs and devices"""

    def __init__(self, user_repository=UserRepository):
        self.user_repository = user_repository

    async def block_ip(self, user_id: str, ip: str) -> bool:
        return await self.user_repository.add_blocked_ip(user_id, ip)

    async def unblock_ip(self, user_id: str, ip: str) -> bool:
        return await self.user_repository.remove_blocked_ip(user_id, ip)

    async def block_device(self, user_id: str, device_id: str) -> bool:
        return await self.user_repository.add_blocked_device(user_id, device_id)

    async def unblock_device(self, user_id: str, device_id: str) -> bool:
        return await self.user_repository.remove_blocked_device(user_id, device_id)

    async def get_block_lists(self, user_id: str) -> Optional[Dict[str, List[str]]]:
        return await self.user_repository.get_block_lists(user_id)


class AccessPolicy:
    """Block-list check invoked by the credential gate for each attempt.

    In observe mode a match is only logged. In enforce mode it rejects
    the attempt with AccessBlocked.
    """

    def __init__(self, mode: BlockListMode = BlockListMode.OBSERVE):
        self.mode = mode

    def match(self, user: User, device_info: DeviceInfo) -> Optional[str]:
        if device_info.ip and device_info.ip in user.blocked_ips:
            return f"ip {device_info.ip}"
        if device_info.device_id and device_info.device_id in user.blocked_devices:
            return f"device {device_info.device_id}"
        return None

    def check(self, user: User, device_info: DeviceInfo) -> Optional[str]:
        reason = self.match(user, device_info)
        if reason is None:
            return None

        if self.mode is BlockListMode.ENFORCE:
            logger.warning(f"Rejected login for {user.username} from blocked {reason}")
            raise AccessBlocked(reason)

        logger.warning(f"Login for {user.username} from blocked {reason} (not enforced)")
        return reason
