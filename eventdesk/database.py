"""Database operations for the application."""

import datetime
import logging
import sqlite3
from contextlib import contextmanager
from typing import Generator, List, Optional

from eventdesk.models import AdminAction, LinkedAccount

# Database schema
CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS linked_accounts (
    discord_id TEXT PRIMARY KEY,
    token TEXT NOT NULL,
    email TEXT NOT NULL,
    role TEXT NOT NULL,
    linked_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS admin_actions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    admin_id TEXT NOT NULL,
    admin_username TEXT NOT NULL,
    action_type TEXT NOT NULL,
    target_id TEXT NOT NULL,
    details TEXT,
    performed_at INTEGER NOT NULL
);
"""


class Database:
    """Handles database operations with proper connection management and error handling"""

    def __init__(self, db_file_path: str):
        self.db_file = db_file_path
        self.logger = logging.getLogger(self.__class__.__name__)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database with required tables"""
        try:
            with self._get_connection() as conn:
                conn.executescript(CREATE_TABLE_SQL)
                conn.commit()
                self.logger.info(f"Database initialized successfully: {self.db_file}")
        except sqlite3.Error as e:
            self.logger.critical(
                f"Failed to initialize database {self.db_file}: {str(e)}"
            )
            raise

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections with proper error handling"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_file)
            conn.row_factory = sqlite3.Row
            self.logger.debug(f"Database connection opened: {self.db_file}")
            yield conn
        except sqlite3.Error as e:
            self.logger.error(f"Database error ({self.db_file}): {str(e)}")
            raise
        finally:
            if conn:
                conn.close()
                self.logger.debug(f"Database connection closed: {self.db_file}")

    def link_account(self, discord_id: str, token: str, email: str, role: str) -> None:
        """Store or replace the bearer token linked to a Discord user."""
        now = int(datetime.datetime.now(datetime.timezone.utc).timestamp())
        self.logger.debug(f"Linking account {email} ({role}) to Discord user {discord_id}")
        with self._get_connection() as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO linked_accounts (discord_id, token, email, role, linked_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(discord_id) DO UPDATE SET
                        token = excluded.token,
                        email = excluded.email,
                        role = excluded.role,
                        linked_at = excluded.linked_at
                    """,
                    (discord_id, token, email, role, now),
                )
        self.logger.info(f"Linked Discord user {discord_id} to {email} ({role})")

    def get_linked_account(self, discord_id: str) -> Optional[LinkedAccount]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM linked_accounts WHERE discord_id = ?", (discord_id,)
            ).fetchone()
        if not row:
            self.logger.debug(f"No linked account for Discord user {discord_id}")
            return None
        return LinkedAccount(
            discord_id=row["discord_id"],
            token=row["token"],
            email=row["email"],
            role=row["role"],
            linked_at=row["linked_at"],
        )

    def update_account_role(self, discord_id: str, role: str) -> bool:
        with self._get_connection() as conn:
            with conn:
                cursor = conn.execute(
                    "UPDATE linked_accounts SET role = ? WHERE discord_id = ?",
                    (role, discord_id),
                )
        return cursor.rowcount > 0

    def unlink_account(self, discord_id: str) -> bool:
        """Forget a Discord user's token. Returns False if nothing was linked."""
        with self._get_connection() as conn:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM linked_accounts WHERE discord_id = ?", (discord_id,)
                )
        removed = cursor.rowcount > 0
        if removed:
            self.logger.info(f"Unlinked account for Discord user {discord_id}")
        return removed

    def record_admin_action(self, action: AdminAction) -> None:
        """Record an admin action in the audit table"""
        self.logger.debug(
            f"Recording admin action: {action.action_type} by {action.admin_username} on {action.target_id}"
        )
        try:
            with self._get_connection() as conn:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO admin_actions (
                            admin_id, admin_username, action_type, target_id,
                            details, performed_at
                        ) VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            action.admin_id,
                            action.admin_username,
                            action.action_type,
                            action.target_id,
                            action.details,
                            action.performed_at,
                        ),
                    )
        except sqlite3.Error as e:
            self.logger.error(f"Error recording admin action: {str(e)}")
            raise

    def get_recent_admin_actions(self, limit: int = 20) -> List[AdminAction]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM admin_actions ORDER BY performed_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [
            AdminAction(
                admin_id=row["admin_id"],
                admin_username=row["admin_username"],
                action_type=row["action_type"],
                target_id=row["target_id"],
                details=row["details"],
                performed_at=row["performed_at"],
            )
            for row in rows
        ]
