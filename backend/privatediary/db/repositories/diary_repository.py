from typing import List, Optional

from privatediary.db.database import get_db
from privatediary.models.diary_entry import DiaryEntry


class DiaryRepository:
    """Repository for diary entry database operations"""

    @staticmethod
    async def create(entry: DiaryEntry) -> DiaryEntry:
        """Create a new entry"""
        data = entry.to_dict()
        columns = ", ".join(data.keys())
        placeholders = ", ".join(["?" for _ in data])

        db = get_db()
        await db.execute(
            f"INSERT INTO diary_entries ({columns}) VALUES ({placeholders})",
            tuple(data.values())
        )
        await db.commit()
        return entry

    @staticmethod
    async def get_by_id(entry_id: str) -> Optional[DiaryEntry]:
        db = get_db()
        row = await db.fetch_one(
            "SELECT * FROM diary_entries WHERE id = ?", (entry_id,)
        )
        return DiaryEntry.from_dict(row) if row else None

    @staticmethod
    async def get_for_user(user_id: str, limit: int = 50) -> List[DiaryEntry]:
        db = get_db()
        rows = await db.fetch_all(
            "SELECT * FROM diary_entries WHERE user_id = ? ORDER BY date DESC LIMIT ?",
            (user_id, limit)
        )
        return [DiaryEntry.from_dict(row) for row in rows]

    @staticmethod
    async def get_recent(limit: int = 50) -> List[DiaryEntry]:
        """Most recent entries across all users"""
        db = get_db()
        rows = await db.fetch_all(
            "SELECT * FROM diary_entries ORDER BY date DESC LIMIT ?", (limit,)
        )
        return [DiaryEntry.from_dict(row) for row in rows]

    @staticmethod
    async def upsert_many(entries: List[DiaryEntry]) -> int:
        """Insert or fully replace entries keyed by id (last write wins)"""
        if not entries:
            return 0

        db = get_db()
        data = [entry.to_dict() for entry in entries]
        columns = list(data[0].keys())
        placeholders = ", ".join(["?" for _ in columns])
        updates = ", ".join([f"{c} = excluded.{c}" for c in columns if c != "id"])

        try:
            await db.execute_many(
                f"""INSERT INTO diary_entries ({", ".join(columns)}) VALUES ({placeholders})
                    ON CONFLICT(id) DO UPDATE SET {updates}""",
                [tuple(row[c] for c in columns) for row in data]
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return len(entries)

    @staticmethod
    async def count() -> int:
        """Get total count of entries"""
        db = get_db()
        result = await db.fetch_one("SELECT COUNT(*) as count FROM diary_entries")
        return result["count"] if result else 0
