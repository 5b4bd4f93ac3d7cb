from .exceptions import (
    DiaryNodeError,
    InvalidCredentials,
    AccountLocked,
    LocationRequired,
    AccessBlocked,
    StoreUnavailable,
    SyncFailure,
    PeerUnreachable
)

__all__ = [
    "DiaryNodeError",
    "InvalidCredentials",
    "AccountLocked",
    "LocationRequired",
    "AccessBlocked",
    "StoreUnavailable",
    "SyncFailure",
    "PeerUnreachable"
]
