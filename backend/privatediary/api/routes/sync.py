from fastapi import APIRouter, Depends, Query
from typing import Optional

from privatediary.auth.dependencies import get_node, require_peer_node
from privatediary.node import DiaryNode, SYNC_JOB
from privatediary.api.schemas import SuccessResponse
from privatediary.schemas.sync import (
    DiaryBatch, SessionBatch, SyncResult, BackupData,
    DiaryEntryPayload, SessionPayload
)

# Node-to-node ingest, exposed by both roles
router = APIRouter(tags=["sync"], dependencies=[Depends(require_peer_node)])

# Operator recovery, exposed only by roles that enable it
recovery_router = APIRouter(tags=["recovery"], dependencies=[Depends(require_peer_node)])


@router.post("/sync-diary", response_model=SyncResult)
async def sync_diary(batch: DiaryBatch, node: DiaryNode = Depends(get_node)):
    synced = await node.replication.upsert_diary_batch([e.to_model() for e in batch.entries])
    return SyncResult(synced=synced)


@router.post("/sync-activity", response_model=SyncResult)
async def sync_activity(batch: SessionBatch, node: DiaryNode = Depends(get_node)):
    synced = await node.replication.upsert_session_batch([s.to_model() for s in batch.activities])
    return SyncResult(synced=synced)


@recovery_router.get("/backup-data", response_model=BackupData)
async def backup_data(
    limit: Optional[int] = Query(None, ge=1),
    node: DiaryNode = Depends(get_node)
):
    """Most recent diary entries and sessions for repopulating a promoted node"""
    data = await node.replication.pull_backup_data(limit)
    return BackupData(
        diary_entries=[DiaryEntryPayload.from_model(e) for e in data["diary_entries"]],
        sessions=[SessionPayload.from_model(s) for s in data["sessions"]]
    )


@recovery_router.post("/sync-now", response_model=SuccessResponse)
async def sync_now(node: DiaryNode = Depends(get_node)):
    """Probe the peer and run a sync cycle immediately"""
    await node.health_monitor.probe()
    ran = await node.scheduler.trigger(SYNC_JOB)
    ok = ran and node.scheduler.jobs[SYNC_JOB].last_result is True
    return SuccessResponse(
        success=ok,
        message="Sync completed" if ok else "Sync skipped or failed",
        data=node.status()
    )
