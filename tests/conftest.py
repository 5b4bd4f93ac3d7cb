"""
Shared fixtures: a throwaway SQLite store per test and a provisioned user.

pytest-asyncio runs in auto mode (see pyproject.toml).
"""

import pytest

from privatediary.db.database import Database, set_db, init_db
from privatediary.db.repositories.user_repository import UserRepository
from privatediary.models.user import User
from privatediary.services.access_control import AccessPolicy
from privatediary.services.credential_gate import CredentialGate
from privatediary.services.lockout_policy import LockoutPolicy
from privatediary.services.session_ledger import SessionLedger
from privatediary.services.session_manager import SessionManager

from tests.helpers import PASSWORD, BACKUP_PASSWORD, fast_hash


@pytest.fixture
async def database(tmp_path):
    db = Database(str(tmp_path / "test.db"))
    set_db(db)
    await init_db(db)
    yield db
    await db.disconnect()


@pytest.fixture
async def alice(database) -> User:
    user = User(
        username="alice",
        password_hash=fast_hash(PASSWORD),
        backup_password_hash=fast_hash(BACKUP_PASSWORD),
        telegram_chat_id="1001"
    )
    return await UserRepository.create(user)


@pytest.fixture
def session_manager() -> SessionManager:
    return SessionManager()


@pytest.fixture
def access_policy() -> AccessPolicy:
    return AccessPolicy()


@pytest.fixture
def gate(database, session_manager, access_policy) -> CredentialGate:
    return CredentialGate(
        lockout_policy=LockoutPolicy(),
        session_ledger=SessionLedger(),
        access_policy=access_policy,
        session_manager=session_manager
    )
