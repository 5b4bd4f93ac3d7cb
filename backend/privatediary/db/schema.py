"""Database schema definitions"""

# Users table: credential store and per-user block lists
USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    username TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    backup_password_hash TEXT,
    location_permission INTEGER DEFAULT 0,
    notification_permission INTEGER DEFAULT 0,
    telegram_chat_id TEXT,
    blocked_ips TEXT,        -- JSON array of strings
    blocked_devices TEXT,    -- JSON array of strings
    emergency_lock_until TEXT,
    last_login TEXT,
    created_at TEXT NOT NULL
)
"""

# Session ledger; no foreign key so replicated rows for users unknown
# to this node are still accepted
LOGIN_ACTIVITY_TABLE = """
CREATE TABLE IF NOT EXISTS login_activity (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT,
    device_id TEXT,
    device_name TEXT,
    ip TEXT,
    location_lat REAL,
    location_lon REAL,
    location_accuracy REAL,
    login_time TEXT NOT NULL,
    logout_time TEXT,
    is_active INTEGER DEFAULT 1,
    is_suspicious INTEGER DEFAULT 0
)
"""

DIARY_ENTRIES_TABLE = """
CREATE TABLE IF NOT EXISTS diary_entries (
    id TEXT PRIMARY KEY,
    user_id TEXT,
    title TEXT,
    content TEXT,
    date TEXT NOT NULL,
    tags TEXT,         -- JSON array of strings
    location TEXT,     -- JSON object {lat, lon, accuracy}
    device_info TEXT   -- JSON object {device_id, ip, user_agent}
)
"""

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_login_activity_user_time ON login_activity(user_id, login_time DESC)",
    "CREATE INDEX IF NOT EXISTS idx_login_activity_device_time ON login_activity(device_id, login_time)",
    "CREATE INDEX IF NOT EXISTS idx_login_activity_active ON login_activity(device_id, is_active)",
    "CREATE INDEX IF NOT EXISTS idx_diary_entries_user_date ON diary_entries(user_id, date DESC)",
]

ALL_TABLES = [
    USERS_TABLE,
    LOGIN_ACTIVITY_TABLE,
    DIARY_ENTRIES_TABLE
]
