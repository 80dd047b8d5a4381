"""
Conversation snapshot repositories.

The conversation store hands a repository the full conversation list after
every mutation and asks for it back once at startup. There is no partial or
incremental contract. To add a new backend, subclass ConversationRepository
and implement load() and save().
"""

import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from msg_classifier.conversations.models import (
    Conversation,
    conversations_from_json,
    conversations_to_json,
)
from msg_classifier.database.inbox_db import InboxDatabase
from msg_classifier.exceptions import PersistenceError
from msg_classifier.utils.logger_config import get_logger

logger = get_logger(__name__)


class ConversationRepository(ABC):
    """Loads and saves complete conversation snapshots."""

    @abstractmethod
    def load(self) -> List[Conversation]:
        """
        Return the stored conversations, or an empty list if none are stored.

        Raises:
            PersistenceError: If stored data exists but cannot be read.
        """
        ...

    @abstractmethod
    def save(self, conversations: List[Conversation]) -> None:
        """
        Persist the full conversation list.

        Raises:
            PersistenceError: If the snapshot cannot be written.
        """
        ...

    @staticmethod
    def _decode(payload: str, source: str) -> List[Conversation]:
        try:
            return conversations_from_json(payload)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise PersistenceError(f"Unreadable conversation snapshot in {source}: {e}")


class SQLiteConversationRepository(ConversationRepository):
    """Keeps the snapshot in the inbox SQLite database."""

    def __init__(self, database: InboxDatabase):
        self.database = database
        if not self.database.create_database():
            logger.warning(f"Inbox database at {database.db_path} could not be initialized")

    def load(self) -> List[Conversation]:
        try:
            payload = self.database.read_snapshot()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read snapshot from {self.database.db_path}: {e}")

        if payload is None:
            return []
        conversations = self._decode(payload, str(self.database.db_path))
        logger.info(f"Loaded {len(conversations)} conversations from {self.database.db_path}")
        return conversations

    def save(self, conversations: List[Conversation]) -> None:
        try:
            self.database.write_snapshot(conversations_to_json(conversations), len(conversations))
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not write snapshot to {self.database.db_path}: {e}")


class JsonFileConversationRepository(ConversationRepository):
    """Keeps the snapshot in a local JSON file."""

    def __init__(self, path: str = "./data/msg_history.json"):
        self.path = Path(path)

    def load(self) -> List[Conversation]:
        if not self.path.exists():
            return []
        try:
            payload = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}")

        if not payload.strip():
            return []
        conversations = self._decode(payload, str(self.path))
        logger.info(f"Loaded {len(conversations)} conversations from {self.path}")
        return conversations

    def save(self, conversations: List[Conversation]) -> None:
        # Readers only ever see a complete file; replace() swaps it in one step
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(conversations_to_json(conversations), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}")
