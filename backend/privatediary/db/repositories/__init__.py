from .user_repository import UserRepository
from .session_repository import SessionRepository
from .diary_repository import DiaryRepository

__all__ = [
    "UserRepository",
    "SessionRepository",
    "DiaryRepository"
]
