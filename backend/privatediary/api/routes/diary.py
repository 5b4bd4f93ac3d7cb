from fastapi import APIRouter, Depends

from privatediary.api.schemas import DiaryCreateRequest, DiaryCreateResponse, DiaryListResponse
from privatediary.auth.dependencies import get_current_session
from privatediary.db.repositories.diary_repository import DiaryRepository
from privatediary.models.diary_entry import DiaryEntry, DeviceMetadata
from privatediary.schemas.sync import DiaryEntryPayload
from privatediary.services.session_manager import UserSession

router = APIRouter(prefix="/diary", tags=["diary"])

DIARY_LIST_LIMIT = 50


@router.post("", response_model=DiaryCreateResponse)
async def create_entry(
    request: DiaryCreateRequest,
    session: UserSession = Depends(get_current_session)
):
    """Create a diary entry for the authenticated user"""
    entry = await DiaryRepository.create(DiaryEntry(
        user_id=session.user_id,
        title=request.entry.title,
        content=request.entry.content,
        tags=list(request.entry.tags),
        location=request.location.to_model() if request.location else None,
        device_info=DeviceMetadata(**request.device_info.model_dump()) if request.device_info else None
    ))
    return DiaryCreateResponse(entry_id=entry.id, date=entry.date)


@router.get("", response_model=DiaryListResponse)
async def list_entries(session: UserSession = Depends(get_current_session)):
    entries = await DiaryRepository.get_for_user(session.user_id, DIARY_LIST_LIMIT)
    return DiaryListResponse(entries=[DiaryEntryPayload.from_model(e) for e in entries])
