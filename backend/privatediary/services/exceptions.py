"""
Custom exceptions for the login gate, the store and node-to-node traffic
"""
from datetime import datetime


class DiaryNodeError(Exception):
    """Base exception for diary node services"""
    pass


class InvalidCredentials(DiaryNodeError):
    """Unknown user or wrong secret; the two are deliberately indistinguishable"""

    def __init__(self):
        super().__init__("Invalid credentials")


class AccountLocked(DiaryNodeError):
    """Raised while an emergency lock is in effect"""

    def __init__(self, until: datetime):
        self.until = until
        super().__init__(f"Account locked until {until.isoformat()}")


class LocationRequired(DiaryNodeError):
    """Login without a location; the account has just been locked"""

    def __init__(self, until: datetime):
        self.until = until
        super().__init__("Location permission required. Account locked for 15 minutes.")


class AccessBlocked(DiaryNodeError):
    """Login attempt from a blocked IP or device while block lists are enforced"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Access blocked: {reason}")


class StoreUnavailable(DiaryNodeError):
    """Raised when the durable store cannot be reached"""
    pass


class SyncFailure(DiaryNodeError):
    """Raised inside the replication engine when a push to the peer fails"""
    pass


class PeerUnreachable(DiaryNodeError):
    """Raised inside the health monitor when the peer cannot be probed"""
    pass
