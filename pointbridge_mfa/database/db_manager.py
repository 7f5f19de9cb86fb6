"""
db_manager.py: SQLite profile store.

Every MFA transition runs as BEGIN IMMEDIATE ... COMMIT on its own
connection: the write lock is taken before the record is read, so two
requests (threads or processes) can't both see a backup code as unused.
"""

import logging
import sqlite3
from datetime import datetime

from ..core.models import BackupCode, MFARecord
from .accounts import check_auth_method, is_eligible
from .setup_database import DATABASE_FILE, setup_database

logger = logging.getLogger(__name__)


def _to_text(value: datetime):
    return value.isoformat() if value else None


def _from_text(value: str):
    return datetime.fromisoformat(value) if value else None


class SQLiteProfileStore:
    """
    Arguments:
        path: SQLite file (created with tables on first use)
        timeout: seconds to wait for another writer's lock
    """

    def __init__(self, path: str = DATABASE_FILE, timeout: float = 10.0):
        self.path = path
        self.timeout = timeout
        setup_database(path)

    def get_db_connection(self) -> sqlite3.Connection:
        """Connection in autocommit mode; transactions are opened explicitly."""
        conn = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    # --- accounts ----------------------------------------------------------
    def add_account(self, user_id: str, auth_method: str, is_active: bool = True) -> None:
        """Register (or update) the account type used for the eligibility check."""
        check_auth_method(auth_method)
        conn = self.get_db_connection()
        try:
            conn.execute(
                """INSERT INTO accounts (user_id, auth_method, is_active) VALUES (?, ?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET
                       auth_method = excluded.auth_method,
                       is_active = excluded.is_active""",
                (user_id, auth_method, int(is_active)),
            )
        finally:
            conn.close()

    def is_eligible_for_mfa(self, user_id: str) -> bool:
        conn = self.get_db_connection()
        try:
            row = conn.execute(
                "SELECT auth_method, is_active FROM accounts WHERE user_id = ?", (user_id,)
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            logger.debug("Account %s not found", user_id)
            return False
        return is_eligible(row["auth_method"], row["is_active"])

    # --- MFA records -------------------------------------------------------
    def _load(self, conn: sqlite3.Connection, user_id: str):
        row = conn.execute(
            """SELECT totp_secret, mfa_enabled, mfa_setup_completed_at
               FROM mfa_records WHERE user_id = ?""",
            (user_id,),
        ).fetchone()
        if row is None:
            return None

        codes = conn.execute(
            """SELECT code_hash, used, used_at FROM backup_codes
               WHERE user_id = ? ORDER BY position""",
            (user_id,),
        ).fetchall()
        return MFARecord(
            user_id=user_id,
            totp_secret=row["totp_secret"],
            mfa_enabled=bool(row["mfa_enabled"]),
            backup_codes=tuple(
                BackupCode(code_hash=c["code_hash"], used=bool(c["used"]),
                           used_at=_from_text(c["used_at"]))
                for c in codes
            ),
            mfa_setup_completed_at=_from_text(row["mfa_setup_completed_at"]),
        )

    def _save(self, conn: sqlite3.Connection, record: MFARecord) -> None:
        conn.execute(
            """INSERT INTO mfa_records (user_id, totp_secret, mfa_enabled, mfa_setup_completed_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(user_id) DO UPDATE SET
                   totp_secret = excluded.totp_secret,
                   mfa_enabled = excluded.mfa_enabled,
                   mfa_setup_completed_at = excluded.mfa_setup_completed_at,
                   updated_at = CURRENT_TIMESTAMP""",
            (record.user_id, record.totp_secret, int(record.mfa_enabled),
             _to_text(record.mfa_setup_completed_at)),
        )
        conn.execute("DELETE FROM backup_codes WHERE user_id = ?", (record.user_id,))
        conn.executemany(
            """INSERT INTO backup_codes (user_id, position, code_hash, used, used_at)
               VALUES (?, ?, ?, ?, ?)""",
            [
                (record.user_id, position, entry.code_hash, int(entry.used), _to_text(entry.used_at))
                for position, entry in enumerate(record.backup_codes)
            ],
        )

    def get_mfa_record(self, user_id: str):
        conn = self.get_db_connection()
        try:
            return self._load(conn, user_id)
        finally:
            conn.close()

    def atomic_update_mfa_record(self, user_id: str, mutator) -> MFARecord:
        """
        Read, apply mutator, write back, all inside one IMMEDIATE transaction.

        If the mutator raises, the transaction is rolled back and the
        exception propagates unchanged.
        """
        conn = self.get_db_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                current = self._load(conn, user_id) or MFARecord.empty(user_id)
                updated = mutator(current)
                if updated != current:
                    self._save(conn, updated)
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            return updated
        finally:
            conn.close()
