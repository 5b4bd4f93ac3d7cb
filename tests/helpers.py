"""
Helpers shared by the test modules.
"""

import bcrypt

from privatediary.core.config import Settings, NodeRole


PASSWORD = "correct-horse"
BACKUP_PASSWORD = "backup-battery"


def fast_hash(secret: str) -> str:
    """bcrypt with minimum cost to keep the suite fast"""
    return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


def make_settings(tmp_path, role: NodeRole = NodeRole.PRIMARY, **overrides) -> Settings:
    values = dict(
        NODE_ROLE=role,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / f'{role.value}.db'}",
        PEER_URL="http://peer.test",
        TELEGRAM_BOT_TOKEN=None,
        NODE_SHARED_SECRET=None,
    )
    values.update(overrides)
    return Settings(**values)
