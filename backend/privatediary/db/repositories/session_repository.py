from typing import List, Optional
from datetime import datetime

from privatediary.db.database import get_db
from privatediary.models.login_activity import LoginActivity
from privatediary.models.base import format_timestamp

# Columns written on replication; the local id is never sent across nodes
_REPLICATED_COLUMNS = [
    "user_id",
    "device_id",
    "device_name",
    "ip",
    "location_lat",
    "location_lon",
    "location_accuracy",
    "login_time",
    "logout_time",
    "is_active",
    "is_suspicious",
]


class SessionRepository:
    """Repository for the login activity ledger"""

    @staticmethod
    async def create(session: LoginActivity) -> LoginActivity:
        """Append a session record"""
        data = session.to_dict()
        del data["id"]

        columns = ", ".join(data.keys())
        placeholders = ", ".join(["?" for _ in data])

        db = get_db()
        cursor = await db.execute(
            f"INSERT INTO login_activity ({columns}) VALUES ({placeholders})",
            tuple(data.values())
        )
        await db.commit()

        session.id = cursor.lastrowid
        return session

    @staticmethod
    async def deactivate_device(device_id: str, logout_time: datetime) -> int:
        """Close every active record for a device"""
        db = get_db()
        cursor = await db.execute(
            """UPDATE login_activity SET is_active = 0, logout_time = ?
               WHERE device_id = ? AND is_active = 1""",
            (format_timestamp(logout_time), device_id)
        )
        await db.commit()
        return cursor.rowcount

    @staticmethod
    async def get_recent_for_user(user_id: str, limit: int = 20) -> List[LoginActivity]:
        db = get_db()
        rows = await db.fetch_all(
            """SELECT * FROM login_activity WHERE user_id = ?
               ORDER BY login_time DESC LIMIT ?""",
            (user_id, limit)
        )
        return [LoginActivity.from_dict(row) for row in rows]

    @staticmethod
    async def get_active_for_user(user_id: str) -> List[LoginActivity]:
        db = get_db()
        rows = await db.fetch_all(
            "SELECT * FROM login_activity WHERE user_id = ? AND is_active = 1",
            (user_id,)
        )
        return [LoginActivity.from_dict(row) for row in rows]

    @staticmethod
    async def get_by_device(device_id: str, user_id: Optional[str] = None) -> List[LoginActivity]:
        """Every record of a device, newest first, optionally limited to one user"""
        query = "SELECT * FROM login_activity WHERE device_id = ?"
        params = [device_id]
        if user_id is not None:
            query += " AND user_id = ?"
            params.append(user_id)
        query += " ORDER BY login_time DESC"

        db = get_db()
        rows = await db.fetch_all(query, tuple(params))
        return [LoginActivity.from_dict(row) for row in rows]

    @staticmethod
    async def get_recent(limit: int = 50) -> List[LoginActivity]:
        """Most recent sessions across all users"""
        db = get_db()
        rows = await db.fetch_all(
            "SELECT * FROM login_activity ORDER BY login_time DESC LIMIT ?",
            (limit,)
        )
        return [LoginActivity.from_dict(row) for row in rows]

    @staticmethod
    async def upsert_many(sessions: List[LoginActivity]) -> int:
        """Insert or fully replace sessions keyed by (device_id, login_time)"""
        db = get_db()
        set_clause = ", ".join([f"{c} = ?" for c in _REPLICATED_COLUMNS])
        columns = ", ".join(_REPLICATED_COLUMNS)
        placeholders = ", ".join(["?" for _ in _REPLICATED_COLUMNS])

        try:
            for session in sessions:
                data = session.to_dict()
                values = tuple(data[c] for c in _REPLICATED_COLUMNS)
                cursor = await db.execute(
                    f"""UPDATE login_activity SET {set_clause}
                        WHERE device_id IS ? AND login_time = ?""",
                    values + (data["device_id"], data["login_time"])
                )
                if cursor.rowcount == 0:
                    await db.execute(
                        f"INSERT INTO login_activity ({columns}) VALUES ({placeholders})",
                        values
                    )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return len(sessions)

    @staticmethod
    async def count(active_only: bool = False) -> int:
        db = get_db()
        query = "SELECT COUNT(*) as count FROM login_activity"
        if active_only:
            query += " WHERE is_active = 1"
        result = await db.fetch_one(query)
        return result["count"] if result else 0
