from typing import List, Optional, Dict
from datetime import datetime

from privatediary.db.database import get_db
from privatediary.models.user import User
from privatediary.models.base import format_timestamp, load_json


class UserRepository:
    """Repository for the credential store and per-user block lists"""

    @staticmethod
    async def create(user: User) -> User:
        """Create a new user"""
        data = user.to_dict()
        columns = ", ".join(data.keys())
        placeholders = ", ".join(["?" for _ in data])

        db = get_db()
        await db.execute(
            f"INSERT INTO users ({columns}) VALUES ({placeholders})",
            tuple(data.values())
        )
        await db.commit()
        return user

    @staticmethod
    async def get_by_username(username: str) -> Optional[User]:
        db = get_db()
        row = await db.fetch_one(
            "SELECT * FROM users WHERE username = ?", (username,)
        )
        return User.from_dict(row) if row else None

    @staticmethod
    async def get_by_id(user_id: str) -> Optional[User]:
        db = get_db()
        row = await db.fetch_one(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        )
        return User.from_dict(row) if row else None

    @staticmethod
    async def get_notifiable() -> List[User]:
        """Users that granted notification permission and linked a chat"""
        db = get_db()
        rows = await db.fetch_all(
            """SELECT * FROM users
               WHERE notification_permission = 1 AND telegram_chat_id IS NOT NULL"""
        )
        return [User.from_dict(row) for row in rows]

    @staticmethod
    async def set_emergency_lock(user_id: str, until: datetime):
        """Overwrite the emergency lock; a single-row write, no compare-and-swap"""
        db = get_db()
        await db.execute(
            "UPDATE users SET emergency_lock_until = ? WHERE id = ?",
            (format_timestamp(until), user_id)
        )
        await db.commit()

    @staticmethod
    async def update_last_login(user_id: str, when: datetime):
        db = get_db()
        await db.execute(
            "UPDATE users SET last_login = ? WHERE id = ?",
            (format_timestamp(when), user_id)
        )
        await db.commit()

    @staticmethod
    async def update_permissions(
        user_id: str,
        location_permission: Optional[bool] = None,
        notification_permission: Optional[bool] = None,
        telegram_chat_id: Optional[str] = None
    ):
        updates = {}
        if location_permission is not None:
            updates["location_permission"] = int(location_permission)
        if notification_permission is not None:
            updates["notification_permission"] = int(notification_permission)
        if telegram_chat_id is not None:
            updates["telegram_chat_id"] = telegram_chat_id
        if not updates:
            return

        set_clause = ", ".join([f"{k} = ?" for k in updates.keys()])
        db = get_db()
        await db.execute(
            f"UPDATE users SET {set_clause} WHERE id = ?",
            tuple(updates.values()) + (user_id,)
        )
        await db.commit()

    # Block lists

    @staticmethod
    async def _modify_list(user_id: str, column: str, value: str, add: bool) -> bool:
        """Set insert/remove on a JSON list column. Returns False for unknown users.

        Each change is a single UPDATE so concurrent calls cannot drop members.
        """
        db = get_db()
        if add:
            await db.execute(
                f"""UPDATE users SET {column} = json_insert(COALESCE({column}, '[]'), '$[#]', ?)
                    WHERE id = ? AND NOT EXISTS (
                        SELECT 1 FROM json_each(COALESCE(users.{column}, '[]')) WHERE value = ?
                    )""",
                (value, user_id, value)
            )
        else:
            await db.execute(
                f"""UPDATE users SET {column} = (
                        SELECT json_group_array(value)
                        FROM json_each(COALESCE(users.{column}, '[]')) WHERE value != ?
                    )
                    WHERE id = ?""",
                (value, user_id)
            )
        await db.commit()

        row = await db.fetch_one("SELECT 1 AS found FROM users WHERE id = ?", (user_id,))
        return row is not None

    @staticmethod
    async def add_blocked_ip(user_id: str, ip: str) -> bool:
        return await UserRepository._modify_list(user_id, "blocked_ips", ip, add=True)

    @staticmethod
    async def remove_blocked_ip(user_id: str, ip: str) -> bool:
        return await UserRepository._modify_list(user_id, "blocked_ips", ip, add=False)

    @staticmethod
    async def add_blocked_device(user_id: str, device_id: str) -> bool:
        return await UserRepository._modify_list(user_id, "blocked_devices", device_id, add=True)

    @staticmethod
    async def remove_blocked_device(user_id: str, device_id: str) -> bool:
        return await UserRepository._modify_list(user_id, "blocked_devices", device_id, add=False)

    @staticmethod
    async def get_block_lists(user_id: str) -> Optional[Dict[str, List[str]]]:
        db = get_db()
        row = await db.fetch_one(
            "SELECT blocked_ips, blocked_devices FROM users WHERE id = ?", (user_id,)
        )
        if row is None:
            return None
        return {
            "blocked_ips": load_json(row["blocked_ips"]) or [],
            "blocked_devices": load_json(row["blocked_devices"]) or []
        }
