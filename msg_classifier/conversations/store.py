"""Conversation store - owns the in-memory conversation list for a session"""

import threading
from typing import Callable, List, Optional, Tuple, Union

from msg_classifier.classification.types import ClassificationResult, MessageType
from msg_classifier.conversations import reconciler
from msg_classifier.conversations.models import Conversation, MessageRecord
from msg_classifier.database.repository import ConversationRepository
from msg_classifier.exceptions import PersistenceError
from msg_classifier.utils.logger_config import get_logger

logger = get_logger(__name__)


class ConversationStore:
    """
    Single owner of the conversation list.

    Mutations from any thread (user actions, the live simulator) are applied
    one at a time under a lock: the reconciler computes the new list from the
    current one, the store swaps it in and hands the full snapshot to the
    repository. Readers get a copy of the list as it was at call time.
    """

    def __init__(self,
                 repository: Optional[ConversationRepository] = None,
                 resolve_name: Optional[Callable[[str], str]] = None):
        """
        Initialize the store and load any saved conversations

        Args:
            repository: Snapshot storage; None keeps conversations in memory only
            resolve_name: Sender key to display name lookup for new conversations
        """
        self.repository = repository
        self.resolve_name = resolve_name
        self._lock = threading.RLock()
        self._conversations: List[Conversation] = []
        self.last_save_error: Optional[str] = None
        self.load()

    def load(self) -> int:
        """
        Replace in-memory state with the stored snapshot

        Unreadable snapshots are logged and treated as an empty inbox.

        Returns:
            Number of conversations loaded
        """
        if self.repository is None:
            return 0

        try:
            loaded = self.repository.load()
        except PersistenceError as e:
            logger.warning(f"Failed to load conversation history, starting empty: {e}")
            loaded = []

        loaded, merged = reconciler.merge_duplicate_senders(loaded)
        if merged:
            logger.warning(f"Merged {merged} duplicate conversations found in stored history")

        with self._lock:
            self._conversations = loaded
        return len(loaded)

    def _save(self) -> None:
        if self.repository is None:
            return
        try:
            self.repository.save(self._conversations)
            self.last_save_error = None
        except PersistenceError as e:
            self.last_save_error = str(e)
            logger.error(f"Failed to save conversations: {e}")

    def _apply(self, conversations: List[Conversation]) -> List[Conversation]:
        # Caller holds the lock
        self._conversations = conversations
        self._save()
        return list(conversations)

    # Mutations

    def ingest(self, record: MessageRecord) -> Tuple[List[Conversation], Conversation]:
        """
        Add a record to its sender's conversation, creating one if needed

        Returns:
            Tuple of (conversations after the change, affected conversation)
        """
        with self._lock:
            conversations, affected = reconciler.ingest(
                self._conversations, record, self.resolve_name
            )
            return self._apply(conversations), affected

    def mark_read(self, conversation_id: str) -> List[Conversation]:
        """Reset a conversation's unread count; unknown ids are ignored"""
        with self._lock:
            return self._apply(reconciler.mark_read(self._conversations, conversation_id))

    def reclassify(self,
                   conversation_id: str,
                   record_id: str,
                   new_result: ClassificationResult) -> List[Conversation]:
        """Replace one record's classification; unknown ids are ignored"""
        with self._lock:
            return self._apply(
                reconciler.reclassify(self._conversations, conversation_id, record_id, new_result)
            )

    def clear_all(self) -> List[Conversation]:
        """Drop every conversation"""
        with self._lock:
            logger.info(f"Clearing {len(self._conversations)} conversations")
            return self._apply(reconciler.clear_all())

    # Reads

    def snapshot(self) -> List[Conversation]:
        """Current conversations, most recently active first"""
        with self._lock:
            return list(self._conversations)

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        with self._lock:
            for conversation in self._conversations:
                if conversation.id == conversation_id:
                    return conversation
        return None

    def find_record(self, record_id: str) -> Optional[Tuple[Conversation, MessageRecord]]:
        """Locate a record by id across all conversations"""
        with self._lock:
            for conversation in self._conversations:
                _, record = conversation.find_message(record_id)
                if record is not None:
                    return conversation, record
        return None

    def filter(self,
               query: str = "",
               category: Union[MessageType, str] = reconciler.ALL_CATEGORIES) -> List[Conversation]:
        """Search the current conversations"""
        return reconciler.filter_conversations(self.snapshot(), query, category)

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversations)
