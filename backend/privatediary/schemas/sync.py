from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from privatediary.models.diary_entry import DiaryEntry, DeviceMetadata
from privatediary.models.login_activity import LoginActivity, GeoLocation
from privatediary.models.base import to_utc


class LocationPayload(BaseModel):
    lat: float
    lon: float
    accuracy: Optional[float] = None

    def to_model(self) -> GeoLocation:
        return GeoLocation(lat=self.lat, lon=self.lon, accuracy=self.accuracy)

    @classmethod
    def from_model(cls, location: Optional[GeoLocation]) -> Optional["LocationPayload"]:
        if location is None:
            return None
        return cls(lat=location.lat, lon=location.lon, accuracy=location.accuracy)


class DeviceMetadataPayload(BaseModel):
    device_id: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None


class DiaryEntryPayload(BaseModel):
    """Diary entry as it travels between nodes"""
    id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    title: str = ""
    content: str = ""
    date: datetime
    tags: List[str] = []
    location: Optional[LocationPayload] = None
    device_info: Optional[DeviceMetadataPayload] = None

    def to_model(self) -> DiaryEntry:
        return DiaryEntry(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            content=self.content,
            date=to_utc(self.date),
            tags=list(self.tags),
            location=self.location.to_model() if self.location else None,
            device_info=DeviceMetadata(**self.device_info.model_dump()) if self.device_info else None
        )

    @classmethod
    def from_model(cls, entry: DiaryEntry) -> "DiaryEntryPayload":
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            title=entry.title,
            content=entry.content,
            date=entry.date,
            tags=entry.tags,
            location=LocationPayload.from_model(entry.location),
            device_info=DeviceMetadataPayload(**entry.device_info.__dict__) if entry.device_info else None
        )


class SessionPayload(BaseModel):
    """Login activity record as it travels between nodes"""
    user_id: Optional[str] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    ip: Optional[str] = None
    location: Optional[LocationPayload] = None
    login_time: datetime
    logout_time: Optional[datetime] = None
    is_active: bool = True
    is_suspicious: bool = False

    def to_model(self) -> LoginActivity:
        return LoginActivity(
            user_id=self.user_id,
            device_id=self.device_id,
            device_name=self.device_name,
            ip=self.ip,
            location=self.location.to_model() if self.location else None,
            login_time=to_utc(self.login_time),
            logout_time=to_utc(self.logout_time),
            is_active=self.is_active,
            is_suspicious=self.is_suspicious
        )

    @classmethod
    def from_model(cls, session: LoginActivity) -> "SessionPayload":
        return cls(
            user_id=session.user_id,
            device_id=session.device_id,
            device_name=session.device_name,
            ip=session.ip,
            location=LocationPayload.from_model(session.location),
            login_time=session.login_time,
            logout_time=session.logout_time,
            is_active=session.is_active,
            is_suspicious=session.is_suspicious
        )


class DiaryBatch(BaseModel):
    entries: List[DiaryEntryPayload]


class SessionBatch(BaseModel):
    activities: List[SessionPayload]


class SyncResult(BaseModel):
    success: bool = True
    synced: int


class BackupData(BaseModel):
    diary_entries: List[DiaryEntryPayload]
    sessions: List[SessionPayload]
