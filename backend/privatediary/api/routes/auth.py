from fastapi import APIRouter, Depends

from privatediary.api.schemas import (
    LoginRequest, LoginResponse, LoginUser, PermissionsUpdate, SuccessResponse
)
from privatediary.auth.dependencies import get_node, get_current_session
from privatediary.db.repositories.user_repository import UserRepository
from privatediary.node import DiaryNode
from privatediary.services.session_manager import UserSession

router = APIRouter(tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
async def login_user(request: LoginRequest, node: DiaryNode = Depends(get_node)):
    """Login with the primary or backup password.

    Gate failures propagate to the registered exception handlers:
    401 for invalid credentials, 403 for locks and blocked access.
    """
    result = await node.credential_gate.authenticate(
        username=request.username,
        secret=request.password,
        use_backup=request.is_backup,
        device_info=request.device_info.to_model(),
        location=request.location.to_model() if request.location else None
    )

    return LoginResponse(
        token=result.session_token,
        user=LoginUser(username=result.username),
        requires_notification_permission=result.requires_notification_permission
    )


@router.put("/permissions", response_model=SuccessResponse)
async def update_permissions(
    request: PermissionsUpdate,
    session: UserSession = Depends(get_current_session)
):
    """Record the permissions granted on the client"""
    await UserRepository.update_permissions(
        session.user_id,
        location_permission=request.location_permission,
        notification_permission=request.notification_permission,
        telegram_chat_id=request.telegram_chat_id
    )
    return SuccessResponse(message="Permissions updated")
