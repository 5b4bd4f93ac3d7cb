from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List
import uuid

from .base import utcnow, format_timestamp, parse_timestamp, dump_json, load_json


@dataclass
class User:
    """Account record held in the credential store"""
    username: str
    password_hash: str
    backup_password_hash: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    location_permission: bool = False
    notification_permission: bool = False
    telegram_chat_id: Optional[str] = None
    blocked_ips: List[str] = field(default_factory=list)
    blocked_devices: List[str] = field(default_factory=list)
    emergency_lock_until: Optional[datetime] = None
    last_login: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)

    def is_locked(self, now: datetime) -> bool:
        return self.emergency_lock_until is not None and now < self.emergency_lock_until

    def to_dict(self):
        """Convert to dictionary for database storage"""
        return {
            "id": self.id,
            "username": self.username,
            "password_hash": self.password_hash,
            "backup_password_hash": self.backup_password_hash,
            "location_permission": int(self.location_permission),
            "notification_permission": int(self.notification_permission),
            "telegram_chat_id": self.telegram_chat_id,
            "blocked_ips": dump_json(self.blocked_ips),
            "blocked_devices": dump_json(self.blocked_devices),
            "emergency_lock_until": format_timestamp(self.emergency_lock_until),
            "last_login": format_timestamp(self.last_login),
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create User from database row"""
        data = dict(data)
        data["location_permission"] = bool(data.get("location_permission"))
        data["notification_permission"] = bool(data.get("notification_permission"))
        data["blocked_ips"] = load_json(data.get("blocked_ips")) or []
        data["blocked_devices"] = load_json(data.get("blocked_devices")) or []
        data["emergency_lock_until"] = parse_timestamp(data.get("emergency_lock_until"))
        data["last_login"] = parse_timestamp(data.get("last_login"))
        data["created_at"] = parse_timestamp(data.get("created_at")) or utcnow()
        return cls(**data)
