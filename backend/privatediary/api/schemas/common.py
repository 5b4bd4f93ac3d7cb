from pydantic import BaseModel
from typing import Optional, Any, TypeVar, Generic

T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success response"""
    success: bool = True
    message: str = "Operation completed successfully"
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """Standard error response"""
    success: bool = False
    message: str
    status_code: int
    path: Optional[str] = None
    locked_until: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "message": "Account locked until 2024-01-01T12:15:00+00:00",
                "status_code": 403,
                "path": "/api/login",
                "locked_until": "2024-01-01T12:15:00+00:00"
            }
        }


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "healthy"
    role: str
    timestamp: str
    store_connected: bool

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "role": "primary",
                "timestamp": "2024-01-01T12:00:00+00:00",
                "store_connected": True
            }
        }


class NodeStatusResponse(BaseModel):
    """Operator view of replication and job state"""
    role: str
    peer_url: str
    peer: Optional[dict] = None
    last_sync_at: Optional[str] = None
    last_sync_error: Optional[str] = None
    jobs: dict[str, Any]
