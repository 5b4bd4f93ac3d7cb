from pydantic import BaseModel, Field
from typing import Optional

from privatediary.schemas.sync import LocationPayload
from privatediary.services.access_control import DeviceInfo


class DeviceInfoPayload(BaseModel):
    device_id: Optional[str] = Field(None, max_length=200)
    device_name: Optional[str] = Field(None, max_length=200)
    ip: Optional[str] = Field(None, max_length=64)

    def to_model(self) -> DeviceInfo:
        return DeviceInfo(device_id=self.device_id, device_name=self.device_name, ip=self.ip)


class LoginRequest(BaseModel):
    """Request model for user login"""
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)
    is_backup: bool = Field(False, description="Authenticate with the backup password")
    device_info: DeviceInfoPayload = Field(default_factory=DeviceInfoPayload)
    location: Optional[LocationPayload] = Field(None, description="Required; logging in without it locks the account")


class LoginUser(BaseModel):
    username: str


class LoginResponse(BaseModel):
    """Response model for successful login"""
    token: str
    user: LoginUser
    requires_notification_permission: bool


class LogoutDeviceRequest(BaseModel):
    device_id: str = Field(..., min_length=1)


class BlockIPRequest(BaseModel):
    ip: str = Field(..., min_length=1, max_length=64)


class BlockDeviceRequest(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=200)


class PermissionsUpdate(BaseModel):
    location_permission: Optional[bool] = None
    notification_permission: Optional[bool] = None
    telegram_chat_id: Optional[str] = None
