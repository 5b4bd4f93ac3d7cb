import bcrypt
import logging
from dataclasses import dataclass
from typing import Optional

from privatediary.db.repositories.user_repository import UserRepository
from privatediary.models.user import User
from privatediary.models.login_activity import LoginActivity, GeoLocation
from privatediary.models.base import utcnow
from .access_control import AccessPolicy, DeviceInfo
from .lockout_policy import LockoutPolicy
from .session_ledger import SessionLedger
from .session_manager import SessionManager
from .exceptions import InvalidCredentials, AccountLocked, LocationRequired

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    session_token: str
    username: str
    requires_notification_permission: bool


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """Verify password against hash; bcrypt compares in constant time"""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


class CredentialGate:
    """Authenticates login attempts and records them in the session ledger"""

    def __init__(
        self,
        lockout_policy: LockoutPolicy,
        session_ledger: SessionLedger,
        access_policy: AccessPolicy,
        session_manager: SessionManager,
        user_repository=UserRepository
    ):
        self.lockout_policy = lockout_policy
        self.session_ledger = session_ledger
        self.access_policy = access_policy
        self.session_manager = session_manager
        self.user_repository = user_repository

    async def register_user(
        self,
        username: str,
        password: str,
        backup_password: Optional[str] = None,
        user_id: Optional[str] = None,
        telegram_chat_id: Optional[str] = None
    ) -> User:
        """Provision an account. Use the same user_id on both nodes."""
        if await self.user_repository.get_by_username(username):
            raise ValueError("Username already exists")

        user = User(
            username=username,
            password_hash=hash_password(password),
            backup_password_hash=hash_password(backup_password) if backup_password else None,
            telegram_chat_id=telegram_chat_id
        )
        if user_id:
            user.id = user_id

        return await self.user_repository.create(user)

    async def authenticate(
        self,
        username: str,
        secret: str,
        use_backup: bool,
        device_info: DeviceInfo,
        location: Optional[GeoLocation] = None
    ) -> LoginResult:
        """Run one login attempt.

        Writes are not rolled back if a later step fails; the sequence is
        not atomic with respect to concurrent attempts for the same user.
        """
        user = await self.user_repository.get_by_username(username)
        if not user:
            raise InvalidCredentials()

        self.access_policy.check(user, device_info)

        now = utcnow()
        if self.lockout_policy.is_locked(user, now):
            raise AccountLocked(user.emergency_lock_until)

        stored_hash = user.backup_password_hash if use_backup else user.password_hash
        if not verify_password(secret, stored_hash):
            raise InvalidCredentials()

        if location is None:
            until = await self.lockout_policy.trigger_lockout(user, now)
            await self.session_ledger.record_login(LoginActivity(
                user_id=user.id,
                device_id=device_info.device_id,
                device_name=device_info.device_name,
                ip=device_info.ip,
                login_time=now,
                is_active=True,
                is_suspicious=True
            ))
            logger.warning(f"Login without location for {username} from {device_info.ip}")
            raise LocationRequired(until)

        await self.user_repository.update_last_login(user.id, now)
        user.last_login = now

        await self.session_ledger.record_login(LoginActivity(
            user_id=user.id,
            device_id=device_info.device_id,
            device_name=device_info.device_name,
            ip=device_info.ip,
            location=location,
            login_time=now,
            is_active=True,
            is_suspicious=False
        ))

        token = self.session_manager.create_session(
            user_id=user.id,
            username=user.username,
            device_id=device_info.device_id
        )
        logger.info(f"Login for {username} on device {device_info.device_id}")

        return LoginResult(
            session_token=token,
            username=user.username,
            requires_notification_permission=not user.notification_permission
        )
