from fastapi import APIRouter, Depends, HTTPException, status

from privatediary.api.schemas import (
    LogoutDeviceRequest, BlockIPRequest, BlockDeviceRequest,
    BlockListsResponse, SuccessResponse
)
from privatediary.auth.dependencies import get_node, get_current_session
from privatediary.node import DiaryNode
from privatediary.services.session_manager import UserSession

router = APIRouter(tags=["security"])


def _require_user(found: bool):
    if not found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found on this node"
        )


@router.post("/logout-device", response_model=SuccessResponse)
async def logout_device(
    request: LogoutDeviceRequest,
    node: DiaryNode = Depends(get_node),
    session: UserSession = Depends(get_current_session)
):
    """Close every active session of a device and revoke its tokens"""
    closed = await node.session_ledger.close_device(request.device_id)
    node.session_manager.end_device_sessions(request.device_id)
    return SuccessResponse(message="Device logged out", data={"closed_sessions": closed})


@router.post("/block-ip", response_model=SuccessResponse)
async def block_ip(
    request: BlockIPRequest,
    node: DiaryNode = Depends(get_node),
    session: UserSession = Depends(get_current_session)
):
    _require_user(await node.access_control.block_ip(session.user_id, request.ip))
    return SuccessResponse(message="IP blocked")


@router.post("/unblock-ip", response_model=SuccessResponse)
async def unblock_ip(
    request: BlockIPRequest,
    node: DiaryNode = Depends(get_node),
    session: UserSession = Depends(get_current_session)
):
    _require_user(await node.access_control.unblock_ip(session.user_id, request.ip))
    return SuccessResponse(message="IP unblocked")


@router.post("/block-device", response_model=SuccessResponse)
async def block_device(
    request: BlockDeviceRequest,
    node: DiaryNode = Depends(get_node),
    session: UserSession = Depends(get_current_session)
):
    _require_user(await node.access_control.block_device(session.user_id, request.device_id))
    return SuccessResponse(message="Device blocked")


@router.post("/unblock-device", response_model=SuccessResponse)
async def unblock_device(
    request: BlockDeviceRequest,
    node: DiaryNode = Depends(get_node),
    session: UserSession = Depends(get_current_session)
):
    _require_user(await node.access_control.unblock_device(session.user_id, request.device_id))
    return SuccessResponse(message="Device unblocked")


@router.get("/block-lists", response_model=BlockListsResponse)
async def get_block_lists(
    node: DiaryNode = Depends(get_node),
    session: UserSession = Depends(get_current_session)
):
    lists = await node.access_control.get_block_lists(session.user_id)
    _require_user(lists is not None)
    return BlockListsResponse(**lists)
