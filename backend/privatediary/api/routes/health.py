from fastapi import APIRouter, Depends

from privatediary.api.schemas import HealthResponse, NodeStatusResponse
from privatediary.auth.dependencies import get_node
from privatediary.node import DiaryNode

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(node: DiaryNode = Depends(get_node)):
    """Liveness endpoint probed by the peer node"""
    return HealthResponse(**await node.health())


@router.get("/node-status", response_model=NodeStatusResponse)
async def node_status(node: DiaryNode = Depends(get_node)):
    """Peer probe, sync and background job state for operators"""
    return NodeStatusResponse(**node.status())
