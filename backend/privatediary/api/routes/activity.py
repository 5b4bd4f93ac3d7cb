from typing import Optional

from fastapi import APIRouter, Depends, Query

from privatediary.api.schemas import ActivityRecord, ActivityResponse
from privatediary.auth.dependencies import get_node, get_current_session
from privatediary.node import DiaryNode
from privatediary.services.session_manager import UserSession

router = APIRouter(tags=["activity"])

RECENT_ACTIVITY_LIMIT = 20


@router.get("/activity", response_model=ActivityResponse)
async def list_activity(
    device_id: Optional[str] = Query(None, min_length=1),
    node: DiaryNode = Depends(get_node),
    session: UserSession = Depends(get_current_session)
):
    """Recent login activity and currently active devices of the caller.

    With ``device_id`` the activity list holds only that device's history.
    """
    if device_id is not None:
        recent = await node.session_ledger.list_device(session.user_id, device_id, RECENT_ACTIVITY_LIMIT)
    else:
        recent = await node.session_ledger.list_recent(session.user_id, RECENT_ACTIVITY_LIMIT)
    active = await node.session_ledger.list_active(session.user_id)

    return ActivityResponse(
        activities=[ActivityRecord.from_model(s) for s in recent],
        active_devices=[ActivityRecord.from_model(s) for s in active]
    )
