from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from privatediary.models.login_activity import LoginActivity
from privatediary.schemas.sync import LocationPayload, DeviceMetadataPayload, DiaryEntryPayload


class ActivityRecord(BaseModel):
    id: Optional[int] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    ip: Optional[str] = None
    location: Optional[LocationPayload] = None
    login_time: datetime
    logout_time: Optional[datetime] = None
    is_active: bool
    is_suspicious: bool

    @classmethod
    def from_model(cls, session: LoginActivity) -> "ActivityRecord":
        return cls(
            id=session.id,
            device_id=session.device_id,
            device_name=session.device_name,
            ip=session.ip,
            location=LocationPayload.from_model(session.location),
            login_time=session.login_time,
            logout_time=session.logout_time,
            is_active=session.is_active,
            is_suspicious=session.is_suspicious
        )


class ActivityResponse(BaseModel):
    activities: List[ActivityRecord]
    active_devices: List[ActivityRecord]


class BlockListsResponse(BaseModel):
    blocked_ips: List[str]
    blocked_devices: List[str]


class DiaryEntryCreate(BaseModel):
    title: str = ""
    content: str
    tags: List[str] = []


class DiaryCreateRequest(BaseModel):
    entry: DiaryEntryCreate
    location: Optional[LocationPayload] = None
    device_info: Optional[DeviceMetadataPayload] = None


class DiaryCreateResponse(BaseModel):
    success: bool = True
    entry_id: str
    date: datetime


class DiaryListResponse(BaseModel):
    entries: List[DiaryEntryPayload]
