from pydantic_settings import BaseSettings
from typing import Optional
from enum import Enum


class NodeRole(str, Enum):
    """Deployment role of a node"""
    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def pushes_to_peer(self) -> bool:
        # Only the secondary pushes its recent records to the primary
        return self is NodeRole.SECONDARY

    @property
    def exposes_recovery(self) -> bool:
        return self is NodeRole.SECONDARY


class BlockListMode(str, Enum):
    OBSERVE = "observe"
    ENFORCE = "enforce"


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "Private Diary"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Node settings
    NODE_ROLE: NodeRole = NodeRole.PRIMARY
    PEER_URL: str = "http://localhost:3001"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./privatediary.db"

    # API settings
    API_PREFIX: str = "/api"

    # CORS settings
    BACKEND_CORS_ORIGINS: list[str] = ["*"]

    # Replication and health monitoring
    HEALTH_CHECK_INTERVAL_SECONDS: Optional[float] = None
    SYNC_INTERVAL_SECONDS: float = 60
    SYNC_BATCH_SIZE: int = 50
    BACKUP_PULL_LIMIT: int = 100
    PEER_TIMEOUT_SECONDS: float = 10
    NODE_SHARED_SECRET: Optional[str] = None

    # Login security
    BLOCK_LIST_MODE: BlockListMode = BlockListMode.OBSERVE
    SESSION_DURATION_HOURS: int = 24

    # Telegram settings
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_API_URL: str = "https://api.telegram.org"

    # Daily reminder (22:00 Assam time)
    REMINDER_HOUR: int = 22
    REMINDER_MINUTE: int = 0
    REMINDER_UTC_OFFSET_MINUTES: int = 330

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def database_path(self) -> str:
        return self.DATABASE_URL.replace("sqlite+aiosqlite:///", "")

    @property
    def health_check_interval(self) -> float:
        """Peer probe interval, defaulting per role"""
        if self.HEALTH_CHECK_INTERVAL_SECONDS is not None:
            return self.HEALTH_CHECK_INTERVAL_SECONDS
        return 30 if self.NODE_ROLE is NodeRole.SECONDARY else 60


settings = Settings()
