from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List
import uuid

from .base import utcnow, format_timestamp, parse_timestamp, dump_json, load_json
from .login_activity import GeoLocation


@dataclass
class DeviceMetadata:
    device_id: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class DiaryEntry:
    """Diary entry model, replicated verbatim between nodes"""
    user_id: Optional[str]
    title: str = ""
    content: str = ""
    date: datetime = field(default_factory=utcnow)
    tags: List[str] = field(default_factory=list)
    location: Optional[GeoLocation] = None
    device_info: Optional[DeviceMetadata] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self):
        """Convert to dictionary for database storage"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "date": format_timestamp(self.date),
            "tags": dump_json(self.tags or []),
            "location": dump_json(self.location.__dict__) if self.location else None,
            "device_info": dump_json(self.device_info.__dict__) if self.device_info else None,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create DiaryEntry from database row"""
        data = dict(data)
        data["date"] = parse_timestamp(data.get("date"))
        data["tags"] = load_json(data.get("tags")) or []
        location = load_json(data.get("location"))
        data["location"] = GeoLocation(**location) if location else None
        device_info = load_json(data.get("device_info"))
        data["device_info"] = DeviceMetadata(**device_info) if device_info else None
        return cls(**data)
