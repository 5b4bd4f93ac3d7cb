import secrets
from fastapi import HTTPException, Request, status
from typing import Optional

from privatediary.node import DiaryNode
from privatediary.services.replication import NODE_TOKEN_HEADER
from privatediary.services.session_manager import UserSession


def get_node(request: Request) -> DiaryNode:
    """The node instance created by the app factory"""
    return request.app.state.node


async def get_current_session(request: Request) -> UserSession:
    """
    Dependency that derives the acting user from the bearer token issued at login.
    Use this on all protected endpoints.
    """
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = auth_header.replace("Bearer ", "", 1)
    is_valid, session = get_node(request).session_manager.validate_session(token)

    if not is_valid or not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session


async def require_peer_node(request: Request) -> None:
    """Guard for node-to-node endpoints when a shared secret is configured"""
    expected: Optional[str] = get_node(request).settings.NODE_SHARED_SECRET
    if not expected:
        return

    supplied = request.headers.get(NODE_TOKEN_HEADER, "")
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid node token"
        )
