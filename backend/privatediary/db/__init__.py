from .database import get_db, set_db, init_db, Database
from .repositories import (
    UserRepository,
    SessionRepository,
    DiaryRepository
)

__all__ = [
    "get_db",
    "set_db",
    "init_db",
    "Database",
    "UserRepository",
    "SessionRepository",
    "DiaryRepository"
]
