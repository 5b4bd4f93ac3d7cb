from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .base import utcnow, format_timestamp, parse_timestamp


@dataclass
class GeoLocation:
    lat: float
    lon: float
    accuracy: Optional[float] = None


@dataclass
class LoginActivity:
    """Per-device login session record.

    ``id`` is local to a node. Across nodes a session is identified by
    ``(device_id, login_time)``.
    """
    user_id: Optional[str]
    device_id: Optional[str]
    device_name: Optional[str] = None
    ip: Optional[str] = None
    location: Optional[GeoLocation] = None
    login_time: datetime = field(default_factory=utcnow)
    logout_time: Optional[datetime] = None
    is_active: bool = True
    is_suspicious: bool = False
    id: Optional[int] = None

    @property
    def replication_key(self):
        return (self.device_id, format_timestamp(self.login_time))

    def to_dict(self):
        """Convert to dictionary for database storage"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "device_id": self.device_id,
            "device_name": self.device_name,
            "ip": self.ip,
            "location_lat": self.location.lat if self.location else None,
            "location_lon": self.location.lon if self.location else None,
            "location_accuracy": self.location.accuracy if self.location else None,
            "login_time": format_timestamp(self.login_time),
            "logout_time": format_timestamp(self.logout_time),
            "is_active": int(self.is_active),
            "is_suspicious": int(self.is_suspicious),
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create LoginActivity from database row"""
        data = dict(data)
        lat = data.pop("location_lat", None)
        lon = data.pop("location_lon", None)
        accuracy = data.pop("location_accuracy", None)
        if lat is not None and lon is not None:
            data["location"] = GeoLocation(lat=lat, lon=lon, accuracy=accuracy)
        data["login_time"] = parse_timestamp(data.get("login_time"))
        data["logout_time"] = parse_timestamp(data.get("logout_time"))
        data["is_active"] = bool(data.get("is_active"))
        data["is_suspicious"] = bool(data.get("is_suspicious"))
        return cls(**data)
