"""Data classes and types for message classification.

This module defines the closed set of message categories and the immutable
classification result returned by the classification client.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional
import json


DEFAULT_REASON = "No reason provided."
DEFAULT_SUMMARY = "No summary available."
ERROR_REASON = "Error processing the message."
ERROR_SUMMARY = "Error."


class MessageType(str, Enum):
    """Categories a message can be classified into"""

    SPAM = "SPAM"
    PERSONAL = "PERSONAL"
    TRANSACTIONAL = "TRANSACTIONAL"
    MARKETING = "MARKETING"
    OTP = "OTP"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_token(cls, token: Optional[str]) -> "MessageType":
        """Parse a category token, falling back to UNKNOWN."""
        if not token or not isinstance(token, str):
            return cls.UNKNOWN
        normalized = token.strip().upper()
        if normalized == "PROMOTIONAL":
            return cls.MARKETING
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one message."""
    category: MessageType
    confidence: float
    reason: str
    summary: str

    @classmethod
    def unknown(cls, reason: str = ERROR_REASON, summary: str = ERROR_SUMMARY) -> "ClassificationResult":
        """UNKNOWN sentinel used whenever classification could not be done."""
        return cls(category=MessageType.UNKNOWN, confidence=0.0, reason=reason, summary=summary)

    @property
    def is_unknown(self) -> bool:
        return self.category is MessageType.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape {type, confidence, reason, summary}."""
        data = asdict(self)
        data["type"] = self.category.value
        del data["category"]
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ClassificationResult":
        """Create instance from a wire dictionary, defaulting missing fields."""
        if not isinstance(data, dict):
            data = {}
        try:
            confidence = float(data.get("confidence") or 0)
        except (TypeError, ValueError):
            confidence = 0.0
        return cls(
            category=MessageType.from_token(data.get("type")),
            confidence=confidence,
            reason=str(data.get("reason") or DEFAULT_REASON),
            summary=str(data.get("summary") or DEFAULT_SUMMARY),
        )

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "ClassificationResult":
        """Create instance from JSON string."""
        return cls.from_dict(json.loads(json_str))
