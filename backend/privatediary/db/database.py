import sqlite3
import logging
import aiosqlite
from typing import Optional

from privatediary.core.config import settings
from privatediary.db.schema import ALL_TABLES, INDEXES
from privatediary.services.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self):
        """Create database connection"""
        if not self._connection:
            try:
                self._connection = await aiosqlite.connect(self.db_path)
            except (sqlite3.Error, OSError) as e:
                raise StoreUnavailable(f"Cannot open store at {self.db_path}: {e}") from e
            self._connection.row_factory = aiosqlite.Row

    async def disconnect(self):
        """Close database connection"""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def execute(self, query: str, params: tuple = ()):
        """Execute a query"""
        if not self._connection:
            await self.connect()
        try:
            return await self._connection.execute(query, params)
        except sqlite3.IntegrityError:
            raise
        except (sqlite3.Error, ValueError) as e:
            # aiosqlite raises ValueError once its connection thread is gone
            logger.error(f"Store error: {e}")
            raise StoreUnavailable(str(e)) from e

    async def execute_many(self, query: str, params: list[tuple]):
        """Execute many queries"""
        if not self._connection:
            await self.connect()
        try:
            return await self._connection.executemany(query, params)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Store error: {e}")
            raise StoreUnavailable(str(e)) from e

    async def fetch_one(self, query: str, params: tuple = ()):
        """Fetch one row"""
        cursor = await self.execute(query, params)
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def fetch_all(self, query: str, params: tuple = ()):
        """Fetch all rows"""
        cursor = await self.execute(query, params)
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def commit(self):
        """Commit transaction"""
        if self._connection:
            try:
                await self._connection.commit()
            except (sqlite3.Error, ValueError) as e:
                raise StoreUnavailable(str(e)) from e

    async def rollback(self):
        """Rollback transaction"""
        if self._connection:
            await self._connection.rollback()

    async def ping(self) -> bool:
        """True when the store answers a trivial query"""
        try:
            await self.fetch_one("SELECT 1")
            return True
        except StoreUnavailable:
            return False


# Global database instance
db = Database()


def get_db() -> Database:
    """Get the current database instance - use this for all database operations"""
    return db


def set_db(database: Database):
    """Replace the global database instance (node startup and tests)"""
    global db
    db = database


async def create_tables(database: Optional[Database] = None):
    """Create all database tables"""
    database = database or get_db()
    for table_sql in ALL_TABLES:
        await database.execute(table_sql)

    for index_sql in INDEXES:
        await database.execute(index_sql)

    await database.commit()


async def init_db(database: Optional[Database] = None):
    """Initialize database with schema"""
    database = database or get_db()
    await database.connect()
    await create_tables(database)
    logger.info(f"Database initialized at {database.db_path}")
