import logging
import os
import sqlite3

logger = logging.getLogger(__name__)

DATABASE_FILE = "database/mfa_database.db"

SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    user_id TEXT PRIMARY KEY,
    auth_method TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS mfa_records (
    user_id TEXT PRIMARY KEY,
    totp_secret TEXT,
    mfa_enabled INTEGER NOT NULL DEFAULT 0,
    mfa_setup_completed_at TEXT,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- one row per backup code; only the hash is stored
CREATE TABLE IF NOT EXISTS backup_codes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    code_hash TEXT NOT NULL,
    used INTEGER NOT NULL DEFAULT 0,
    used_at TEXT,
    FOREIGN KEY (user_id) REFERENCES mfa_records (user_id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_backup_codes_user ON backup_codes (user_id);
"""


def setup_database(path: str = DATABASE_FILE) -> None:
    """Create the MFA tables (idempotent)."""
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    conn = sqlite3.connect(path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    logger.info("Database setup completed: %s", path)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    setup_database()
