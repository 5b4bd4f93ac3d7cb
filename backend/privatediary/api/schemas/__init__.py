from .auth import (
    DeviceInfoPayload,
    LoginRequest,
    LoginResponse,
    LoginUser,
    LogoutDeviceRequest,
    BlockIPRequest,
    BlockDeviceRequest,
    PermissionsUpdate
)
from .activity import (
    ActivityRecord,
    ActivityResponse,
    BlockListsResponse,
    DiaryCreateRequest,
    DiaryCreateResponse,
    DiaryListResponse
)
from .common import (
    SuccessResponse,
    ErrorResponse,
    HealthResponse,
    NodeStatusResponse
)

__all__ = [
    # Auth schemas
    "DeviceInfoPayload",
    "LoginRequest",
    "LoginResponse",
    "LoginUser",
    "LogoutDeviceRequest",
    "BlockIPRequest",
    "BlockDeviceRequest",
    "PermissionsUpdate",

    # Activity and diary schemas
    "ActivityRecord",
    "ActivityResponse",
    "BlockListsResponse",
    "DiaryCreateRequest",
    "DiaryCreateResponse",
    "DiaryListResponse",

    # Common schemas
    "SuccessResponse",
    "ErrorResponse",
    "HealthResponse",
    "NodeStatusResponse"
]
