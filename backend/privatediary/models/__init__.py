from .user import User
from .login_activity import LoginActivity, GeoLocation
from .diary_entry import DiaryEntry, DeviceMetadata
from .base import utcnow

__all__ = [
    "User",
    "LoginActivity",
    "GeoLocation",
    "DiaryEntry",
    "DeviceMetadata",
    "utcnow"
]
