from datetime import datetime, timezone
from typing import Optional, Any
import json


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC; naive values are taken as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Storage form of a timestamp.

    Both nodes must produce the same string for the same instant because
    session replication keys on the stored login time.
    """
    value = to_utc(value)
    return value.isoformat() if value else None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return to_utc(datetime.fromisoformat(value))


def dump_json(value: Any) -> Optional[str]:
    return json.dumps(value) if value is not None else None


def load_json(value: Optional[str]) -> Any:
    return json.loads(value) if value else None

