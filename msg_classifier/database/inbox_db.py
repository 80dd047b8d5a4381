"""Inbox Database Manager - Creates and manages msg_classifier.db"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any

from msg_classifier.utils.logger_config import get_logger

logger = get_logger(__name__)

DEFAULT_PROFILE_NAME = "Me"
DEFAULT_PROFILE_PHONE = "+1 (000) 000-0000"


class InboxDatabase:
    """Manager for the inbox database: conversation snapshot, contacts and profile"""

    def __init__(self, db_path: str = "./data/msg_classifier.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def create_database(self) -> bool:
        """
        Create the inbox database tables

        Returns:
            True if successful, False otherwise
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                # Single-row table holding the full conversation snapshot
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS conversation_snapshot (
                        id INTEGER PRIMARY KEY CHECK (id = 1),
                        payload TEXT NOT NULL,
                        conversation_count INTEGER NOT NULL DEFAULT 0,
                        updated_at TEXT NOT NULL
                    )
                """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS contacts (
                        phone TEXT PRIMARY KEY,
                        name TEXT NOT NULL
                    )
                """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS profile (
                        id INTEGER PRIMARY KEY CHECK (id = 1),
                        name TEXT NOT NULL,
                        phone TEXT NOT NULL
                    )
                """
                )

                cursor.execute(
                    "INSERT OR IGNORE INTO profile (id, name, phone) VALUES (1, ?, ?)",
                    (DEFAULT_PROFILE_NAME, DEFAULT_PROFILE_PHONE),
                )

                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_contacts_name ON contacts(name)"
                )

                conn.commit()
                logger.info(f"Created inbox database with snapshot, contacts and profile tables at {self.db_path}")
                return True

        except sqlite3.Error as e:
            logger.error(f"Error creating inbox database: {e}")
            return False

    # Conversation snapshot

    def read_snapshot(self) -> Optional[str]:
        """
        Read the stored conversation snapshot

        Returns:
            The JSON payload, or None if nothing has been stored yet

        Raises:
            sqlite3.Error: If the database cannot be read
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT payload FROM conversation_snapshot WHERE id = 1")
            row = cursor.fetchone()
            return row[0] if row else None

    def write_snapshot(self, payload: str, conversation_count: int) -> None:
        """
        Replace the stored conversation snapshot

        Args:
            payload: JSON payload of the full conversation list
            conversation_count: Number of conversations in the payload

        Raises:
            sqlite3.Error: If the database cannot be written
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO conversation_snapshot (id, payload, conversation_count, updated_at)
                VALUES (1, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    payload = excluded.payload,
                    conversation_count = excluded.conversation_count,
                    updated_at = excluded.updated_at
            """,
                (payload, conversation_count, datetime.now().isoformat()),
            )
            conn.commit()

    # Contacts

    def upsert_contact(self, phone: str, name: str) -> bool:
        """
        Insert or replace a contact

        Args:
            phone: Phone number key
            name: Display name

        Returns:
            True if successful, False otherwise
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "INSERT OR REPLACE INTO contacts (phone, name) VALUES (?, ?)",
                    (phone, name),
                )
                conn.commit()
                return True

        except sqlite3.Error as e:
            logger.error(f"Error saving contact {phone}: {e}")
            return False

    def delete_contact(self, phone: str) -> bool:
        """
        Delete a contact by phone number

        Returns:
            True if a row was deleted, False otherwise
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM contacts WHERE phone = ?", (phone,))
                conn.commit()
                return cursor.rowcount > 0

        except sqlite3.Error as e:
            logger.error(f"Error deleting contact {phone}: {e}")
            return False

    def get_all_contacts(self) -> List[Dict[str, str]]:
        """
        Get all stored contacts

        Returns:
            List of {"phone", "name"} dictionaries ordered by name
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT phone, name FROM contacts ORDER BY name")
                return [{"phone": phone, "name": name} for phone, name in cursor.fetchall()]

        except sqlite3.Error as e:
            logger.error(f"Error getting contacts: {e}")
            return []

    # Profile

    def get_profile(self) -> Dict[str, str]:
        """
        Get the user's own profile

        Returns:
            {"name", "phone"} dictionary; defaults if the row is missing
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT name, phone FROM profile WHERE id = 1")
                row = cursor.fetchone()
                if row:
                    return {"name": row[0], "phone": row[1]}

        except sqlite3.Error as e:
            logger.error(f"Error getting profile: {e}")

        return {"name": DEFAULT_PROFILE_NAME, "phone": DEFAULT_PROFILE_PHONE}

    def update_profile(self, name: str, phone: str) -> bool:
        """
        Update the user's own profile

        Returns:
            True if successful, False otherwise
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO profile (id, name, phone) VALUES (1, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET name = excluded.name, phone = excluded.phone
                """,
                    (name, phone),
                )
                conn.commit()
                return True

        except sqlite3.Error as e:
            logger.error(f"Error updating profile: {e}")
            return False

    def get_database_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the inbox database

        Returns:
            Dictionary with row counts and snapshot timestamp
        """
        stats = {"contacts": 0, "conversations": 0, "snapshot_updated_at": None}
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM contacts")
                stats["contacts"] = cursor.fetchone()[0]

                cursor.execute(
                    "SELECT conversation_count, updated_at FROM conversation_snapshot WHERE id = 1"
                )
                row = cursor.fetchone()
                if row:
                    stats["conversations"], stats["snapshot_updated_at"] = row

        except sqlite3.Error as e:
            logger.error(f"Error getting database stats: {e}")

        return stats
