import secrets
from datetime import datetime, timedelta
from typing import Optional, Dict, Tuple
from dataclasses import dataclass

from privatediary.models.base import utcnow


@dataclass
class UserSession:
    """Bearer session issued on a successful login"""
    token: str
    user_id: str
    username: str
    device_id: Optional[str]
    created_at: datetime
    last_activity: datetime
    expires_at: datetime


class SessionManager:
    """In-memory session tokens for the current node.

    Tokens are not replicated; after traffic is moved to the other node
    clients have to log in again.
    """

    def __init__(self, session_duration_hours: int = 24):
        self.active_sessions: Dict[str, UserSession] = {}
        self.session_duration = timedelta(hours=session_duration_hours)

    def create_session(self, user_id: str, username: str, device_id: Optional[str] = None) -> str:
        """Create new session and return its token"""
        token = secrets.token_hex(32)
        now = utcnow()

        self.active_sessions[token] = UserSession(
            token=token,
            user_id=user_id,
            username=username,
            device_id=device_id,
            created_at=now,
            last_activity=now,
            expires_at=now + self.session_duration
        )
        return token

    def get_session(self, token: str) -> Optional[UserSession]:
        """Get active session by token"""
        session = self.active_sessions.get(token)

        if not session:
            return None

        if utcnow() > session.expires_at:
            self.end_session(token)
            return None

        session.last_activity = utcnow()
        return session

    def validate_session(self, token: str) -> Tuple[bool, Optional[UserSession]]:
        """Validate session and return session data"""
        session = self.get_session(token)
        return (session is not None, session)

    def end_session(self, token: str) -> bool:
        return self.active_sessions.pop(token, None) is not None

    def end_device_sessions(self, device_id: str) -> int:
        """End every session issued to a device"""
        tokens = [t for t, s in self.active_sessions.items() if s.device_id == device_id]
        for token in tokens:
            self.end_session(token)
        return len(tokens)

    def cleanup_expired_sessions(self) -> int:
        """Remove expired sessions"""
        now = utcnow()
        expired = [t for t, s in self.active_sessions.items() if now > s.expires_at]

        for token in expired:
            self.end_session(token)

        return len(expired)

    def get_active_sessions_count(self) -> int:
        self.cleanup_expired_sessions()
        return len(self.active_sessions)
