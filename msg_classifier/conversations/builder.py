"""Builds message records from classified text."""
import time
import uuid
from typing import Callable, Optional

from msg_classifier.classification.types import ClassificationResult
from msg_classifier.conversations.models import MessageRecord


def now_millis() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    """128-bit random identifier."""
    return uuid.uuid4().hex


def build_record(text: str,
                 sender: str,
                 result: ClassificationResult,
                 is_outgoing: bool = False,
                 clock: Optional[Callable[[], int]] = None) -> MessageRecord:
    """Create a message record with a fresh id and timestamp.

    Callers are expected to reject blank text before classifying it; the
    builder does not validate.

    Args:
        text: Original message body
        sender: Phone number or display name the message is grouped under
        result: Classification of ``text``
        is_outgoing: True for messages the user sent
        clock: Optional replacement for the wall clock, returning epoch millis

    Returns:
        The new MessageRecord
    """
    return MessageRecord(
        id=new_id(),
        sender=sender,
        text=text,
        result=result,
        timestamp=(clock or now_millis)(),
        is_outgoing=is_outgoing,
    )
