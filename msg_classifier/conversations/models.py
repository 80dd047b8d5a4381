"""Data models for the conversations service."""
from dataclasses import dataclass
from typing import Any, Dict, List
import json

from msg_classifier.classification.types import ClassificationResult


@dataclass(frozen=True)
class MessageRecord:
    """A single classified message.

    Only ``result`` ever changes after creation, and it changes by building a
    new record with ``dataclasses.replace``.
    """
    id: str
    sender: str
    text: str
    result: ClassificationResult
    timestamp: int  # epoch millis
    is_outgoing: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "sender": self.sender,
            "text": self.text,
            "result": self.result.to_dict(),
            "timestamp": self.timestamp,
            "isOutgoing": self.is_outgoing,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessageRecord":
        """Create instance from dictionary."""
        return cls(
            id=str(data["id"]),
            sender=str(data["sender"]),
            text=str(data["text"]),
            result=ClassificationResult.from_dict(data.get("result")),
            timestamp=int(data["timestamp"]),
            is_outgoing=bool(data.get("isOutgoing", False)),
        )


@dataclass(frozen=True)
class Conversation:
    """All messages exchanged with one sender, newest first."""
    id: str
    contact_name: str
    phone_number: str  # the sender key this conversation was created for
    messages: List[MessageRecord]
    unread_count: int = 0

    def __post_init__(self):
        if not self.messages:
            raise ValueError("A conversation needs at least one message")
        if self.unread_count < 0:
            raise ValueError("unread_count must be non-negative")

    @property
    def last_message(self) -> MessageRecord:
        """Most recent message; always the head of ``messages``."""
        return self.messages[0]

    def find_message(self, record_id: str):
        """Return (index, record) for the given id, or (None, None)."""
        for index, record in enumerate(self.messages):
            if record.id == record_id:
                return index, record
        return None, None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "contactName": self.contact_name,
            "phoneNumber": self.phone_number,
            "lastMessage": self.last_message.to_dict(),
            "messages": [record.to_dict() for record in self.messages],
            "unreadCount": self.unread_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Conversation":
        """Create instance from dictionary.

        ``lastMessage`` is ignored on the way in; it is always derived from
        the message list.
        """
        return cls(
            id=str(data["id"]),
            contact_name=str(data["contactName"]),
            phone_number=str(data["phoneNumber"]),
            messages=[MessageRecord.from_dict(m) for m in data["messages"]],
            unread_count=max(0, int(data.get("unreadCount", 0))),
        )


def conversations_to_json(conversations: List[Conversation]) -> str:
    """Serialize a full conversation snapshot."""
    return json.dumps([c.to_dict() for c in conversations])


def conversations_from_json(payload: str) -> List[Conversation]:
    """Deserialize a full conversation snapshot.

    Raises:
        ValueError, KeyError, TypeError: If the payload is not a valid snapshot.
    """
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError("Conversation snapshot must be a JSON array")
    return [Conversation.from_dict(item) for item in data]
