"""Tests for message record building and the snapshot codec"""

import json
import time

import pytest

from msg_classifier.classification.types import ClassificationResult, MessageType
from msg_classifier.conversations.builder import build_record
from msg_classifier.conversations.models import (
    Conversation,
    MessageRecord,
    conversations_from_json,
    conversations_to_json,
)


OTP_RESULT = ClassificationResult(MessageType.OTP, 0.97, "Contains a code", "Login code")


def test_build_record_fields():
    record = build_record("Your OTP is 1234", "+1 555 0100", OTP_RESULT, clock=lambda: 1234567890123)

    assert record.text == "Your OTP is 1234"
    assert record.sender == "+1 555 0100"
    assert record.result is OTP_RESULT
    assert record.timestamp == 1234567890123
    assert record.is_outgoing is False


def test_build_record_outgoing():
    record = build_record("on my way", "Mom", OTP_RESULT, is_outgoing=True)
    assert record.is_outgoing is True


def test_build_record_ids_are_unique_128_bit():
    ids = {build_record("x", "A", OTP_RESULT).id for _ in range(1000)}
    assert len(ids) == 1000
    assert all(len(i) == 32 for i in ids)
    int(next(iter(ids)), 16)


def test_build_record_uses_wall_clock():
    before = int(time.time() * 1000)
    record = build_record("x", "A", OTP_RESULT)
    after = int(time.time() * 1000)
    assert before <= record.timestamp <= after


def test_record_is_immutable():
    record = build_record("x", "A", OTP_RESULT)
    with pytest.raises(AttributeError):
        record.text = "changed"


def test_snapshot_round_trip_keeps_last_message_consistent():
    older = build_record("older", "A", OTP_RESULT, clock=lambda: 1)
    newer = build_record("newer", "A", ClassificationResult.unknown(), is_outgoing=True, clock=lambda: 2)
    conversation = Conversation(
        id="c1", contact_name="Alice", phone_number="A", messages=[newer, older], unread_count=1
    )

    payload = conversations_to_json([conversation])
    data = json.loads(payload)
    assert data[0]["lastMessage"]["id"] == newer.id
    assert data[0]["messages"][0]["isOutgoing"] is True
    assert data[0]["messages"][1]["result"]["type"] == "OTP"

    restored = conversations_from_json(payload)
    assert restored == [conversation]
    assert restored[0].last_message is restored[0].messages[0]


def test_record_from_dict_defaults():
    record = MessageRecord.from_dict({
        "id": "r1",
        "sender": "A",
        "text": "hi",
        "timestamp": 5,
        "result": {"type": "SOMETHING_NEW"},
    })

    assert record.is_outgoing is False
    assert record.result.category is MessageType.UNKNOWN
    assert record.result.confidence == 0.0
    assert record.result.reason == "No reason provided."
    assert record.result.summary == "No summary available."


def test_snapshot_must_be_a_list():
    with pytest.raises(ValueError):
        conversations_from_json('{"id": "c1"}')
