"""Tests for classification types."""

import json

import pytest

from msg_classifier.classification.types import ClassificationResult, MessageType


class TestMessageType:
    """Test category token parsing."""

    @pytest.mark.parametrize("token,expected", [
        ("SPAM", MessageType.SPAM),
        ("personal", MessageType.PERSONAL),
        ("  Transactional ", MessageType.TRANSACTIONAL),
        ("otp", MessageType.OTP),
        ("PROMOTIONAL", MessageType.MARKETING),
        ("marketing", MessageType.MARKETING),
        ("UNKNOWN", MessageType.UNKNOWN),
        ("newsletter", MessageType.UNKNOWN),
        ("", MessageType.UNKNOWN),
        (None, MessageType.UNKNOWN),
        (42, MessageType.UNKNOWN),
    ])
    def test_from_token(self, token, expected):
        assert MessageType.from_token(token) is expected

    def test_closed_set(self):
        assert [t.value for t in MessageType] == [
            "SPAM", "PERSONAL", "TRANSACTIONAL", "MARKETING", "OTP", "UNKNOWN"
        ]


class TestClassificationResult:
    """Test ClassificationResult dataclass."""

    def test_unknown_sentinel(self):
        result = ClassificationResult.unknown()

        assert result.category is MessageType.UNKNOWN
        assert result.confidence == 0.0
        assert result.reason == "Error processing the message."
        assert result.summary == "Error."
        assert result.is_unknown

    def test_to_dict_uses_type_key(self):
        result = ClassificationResult(MessageType.SPAM, 0.9, "Prize scam", "Fake prize")

        assert result.to_dict() == {
            "type": "SPAM",
            "confidence": 0.9,
            "reason": "Prize scam",
            "summary": "Fake prize",
        }
        assert json.loads(result.to_json())["type"] == "SPAM"

    def test_from_dict_defaults(self):
        result = ClassificationResult.from_dict({"type": "otp"})

        assert result.category is MessageType.OTP
        assert result.confidence == 0.0
        assert result.reason == "No reason provided."
        assert result.summary == "No summary available."

    def test_from_dict_bad_confidence(self):
        assert ClassificationResult.from_dict({"confidence": "high"}).confidence == 0.0
        assert ClassificationResult.from_dict(None).is_unknown

    @pytest.mark.parametrize("data", [["SPAM"], "SPAM", 7])
    def test_from_dict_non_mapping(self, data):
        result = ClassificationResult.from_dict(data)
        assert result.is_unknown
        assert result.reason == "No reason provided."

    def test_from_json(self):
        result = ClassificationResult.from_json(
            '{"type": "TRANSACTIONAL", "confidence": "0.75", "reason": "Receipt", "summary": "Order"}'
        )
        assert result == ClassificationResult(MessageType.TRANSACTIONAL, 0.75, "Receipt", "Order")

    def test_immutable(self):
        result = ClassificationResult.unknown()
        with pytest.raises(AttributeError):
            result.confidence = 1.0
