"""
Inbox service - the entry point the presentation layer talks to.

Coordinates validation, classification, record building and the conversation
store. Classification runs outside the store's lock, so a slow LLM call never
blocks other mutations; the resulting record is merged whenever it arrives.
"""

import threading
import time
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

from msg_classifier.classification.types import ClassificationResult, MessageType
from msg_classifier.conversations.builder import build_record
from msg_classifier.conversations.models import Conversation, MessageRecord
from msg_classifier.conversations.reconciler import ALL_CATEGORIES
from msg_classifier.conversations.store import ConversationStore
from msg_classifier.exceptions import MessageValidationError
from msg_classifier.user.contact_directory import ContactDirectory
from msg_classifier.utils.logger_config import get_logger, preview

logger = get_logger(__name__)


class Classifier(Protocol):
    def classify(self, text: str) -> ClassificationResult:
        ...


@dataclass
class ClassificationMetrics:
    """Timing and outcome counters for classification calls."""
    total_classifications: int = 0
    unknown_results: int = 0
    total_duration: float = 0.0
    last_duration: float = 0.0

    @property
    def average_duration(self) -> float:
        if not self.total_classifications:
            return 0.0
        return self.total_duration / self.total_classifications


class InboxService:
    """Receives, sends, classifies and organizes messages"""

    def __init__(self,
                 store: ConversationStore,
                 classifier: Classifier,
                 contacts: Optional[ContactDirectory] = None):
        """
        Initialize the service

        Args:
            store: Conversation store owning session state
            classifier: Anything with classify(text) -> ClassificationResult
            contacts: Directory used to name new conversations
        """
        self.store = store
        self.classifier = classifier
        self.contacts = contacts or ContactDirectory()
        if self.store.resolve_name is None:
            self.store.resolve_name = self.contacts.resolve
        self.metrics = ClassificationMetrics()
        self._metrics_lock = threading.Lock()

    @staticmethod
    def _require_text(text: str, field_name: str = "text") -> str:
        if not isinstance(text, str) or not text.strip():
            raise MessageValidationError(f"{field_name} must be a non-empty string")
        return text

    def _classify(self, text: str) -> ClassificationResult:
        start = time.monotonic()
        result = self.classifier.classify(text)
        duration = time.monotonic() - start

        with self._metrics_lock:
            self.metrics.total_classifications += 1
            self.metrics.total_duration += duration
            self.metrics.last_duration = duration
            if result.is_unknown:
                self.metrics.unknown_results += 1

        logger.debug(f"Classification took {duration:.2f}s")
        return result

    def receive_message(self, text: str, sender: str) -> Tuple[MessageRecord, Conversation]:
        """
        Classify an inbound message and file it under its sender

        Args:
            text: Message body
            sender: Phone number or display name of the sender

        Returns:
            Tuple of (new record, conversation it landed in)

        Raises:
            MessageValidationError: If text or sender is blank
        """
        self._require_text(text)
        self._require_text(sender, "sender")
        sender = sender.strip()

        logger.info(f"Received message from {sender}: {preview(text)}")
        result = self._classify(text)
        record = build_record(text, sender, result)
        _, conversation = self.store.ingest(record)
        return record, conversation

    def send_message(self, conversation_id: str, text: str) -> Tuple[MessageRecord, Conversation]:
        """
        Classify and file an outgoing message in an existing conversation

        Raises:
            MessageValidationError: If text is blank or the conversation is unknown
        """
        self._require_text(text)
        conversation = self.store.get_conversation(conversation_id)
        if conversation is None:
            raise MessageValidationError(f"Unknown conversation: {conversation_id}")

        logger.info(f"Sending message to {conversation.phone_number}: {preview(text)}")
        result = self._classify(text)
        record = build_record(text, conversation.phone_number, result, is_outgoing=True)
        _, updated = self.store.ingest(record)
        return record, updated

    def reclassify_message(self, conversation_id: str, record_id: str) -> Optional[ClassificationResult]:
        """
        Run classification again for a stored message

        Returns:
            The new result, or None if the record no longer exists
        """
        found = self.store.find_record(record_id)
        if found is None:
            logger.info(f"Record {record_id} not found, skipping reclassification")
            return None

        _, record = found
        result = self._classify(record.text)
        self.store.reclassify(conversation_id, record_id, result)
        logger.info(f"Reclassified {record_id} as {result.category.value}")
        return result

    def mark_read(self, conversation_id: str) -> None:
        self.store.mark_read(conversation_id)

    def clear_all(self) -> None:
        """Delete every conversation. Confirmation is the caller's job."""
        self.store.clear_all()

    def list_conversations(self) -> List[Conversation]:
        return self.store.snapshot()

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self.store.get_conversation(conversation_id)

    @staticmethod
    def _require_category(category: Union[MessageType, str, None]) -> Union[MessageType, str]:
        if isinstance(category, MessageType):
            return category
        token = (category or "").strip().upper()
        if not token or token == ALL_CATEGORIES:
            return ALL_CATEGORIES
        parsed = MessageType.from_token(token)
        if parsed is MessageType.UNKNOWN and token != MessageType.UNKNOWN.value:
            choices = ", ".join([ALL_CATEGORIES] + [t.value for t in MessageType])
            raise MessageValidationError(f"Unknown category: {category} (expected one of {choices})")
        return parsed

    def search(self,
               query: str = "",
               category: Union[MessageType, str] = ALL_CATEGORIES) -> List[Conversation]:
        """
        Filter conversations by text and last-message category

        Raises:
            MessageValidationError: If category is not ALL or a known category
        """
        return self.store.filter(query, self._require_category(category))

    def get_status(self) -> Dict[str, Any]:
        """
        Get current inbox statistics

        Returns:
            Dictionary with conversation, unread and classification counts
        """
        conversations = self.store.snapshot()
        categories = Counter(
            record.result.category.value
            for conversation in conversations
            for record in conversation.messages
        )
        with self._metrics_lock:
            metrics = {
                "total_classifications": self.metrics.total_classifications,
                "unknown_results": self.metrics.unknown_results,
                "average_duration_seconds": self.metrics.average_duration,
                "last_duration_seconds": self.metrics.last_duration,
            }

        return {
            "conversations": len(conversations),
            "messages": sum(len(c.messages) for c in conversations),
            "unread": sum(c.unread_count for c in conversations),
            "categories": {t.value: categories.get(t.value, 0) for t in MessageType},
            "classification": metrics,
            "last_save_error": self.store.last_save_error,
        }
