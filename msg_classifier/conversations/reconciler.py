"""Conversation reconciliation.

Folds classified message records into per-sender conversations. Every
function here is pure: it takes the current list of conversations (most
recently active first) and returns a new list. Neither the input list nor the
conversations inside it are modified; changed conversations are rebuilt with
``dataclasses.replace``.
"""
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Tuple, Union

from msg_classifier.classification.types import ClassificationResult, MessageType
from msg_classifier.conversations.builder import new_id
from msg_classifier.conversations.models import Conversation, MessageRecord
from msg_classifier.utils.logger_config import get_logger

logger = get_logger(__name__)

ALL_CATEGORIES = "ALL"

NameResolver = Callable[[str], str]


def _identity(sender: str) -> str:
    return sender


def find_conversation_index(conversations: List[Conversation],
                            keys: Iterable[str]) -> Optional[int]:
    """Locate the conversation a set of sender keys belongs to.

    A conversation matches when its phone number OR its contact name is one
    of ``keys``, so callers may pass either a raw address or a resolved
    display name. The first match in list order wins.

    Args:
        conversations: Conversations, most recent first
        keys: Candidate sender keys

    Returns:
        Index of the matching conversation, or None
    """
    candidates = {key for key in keys if key}
    if not candidates:
        return None

    for index, conversation in enumerate(conversations):
        if conversation.phone_number in candidates or conversation.contact_name in candidates:
            return index
    return None


def ingest(conversations: List[Conversation],
           record: MessageRecord,
           resolve_name: Optional[NameResolver] = None) -> Tuple[List[Conversation], Conversation]:
    """Fold a new record into the conversation list.

    Args:
        conversations: Current conversations, most recent first
        record: The record to add
        resolve_name: Maps a sender key to a display name; the raw sender is
            used when omitted or when it returns nothing

    Returns:
        Tuple of (updated conversations, the created or updated conversation).
        The affected conversation is always at index 0.
    """
    index = find_conversation_index(conversations, [record.sender])
    unread_increment = 0 if record.is_outgoing else 1

    if index is not None:
        existing = conversations[index]
        updated = replace(
            existing,
            messages=[record] + list(existing.messages),
            unread_count=existing.unread_count + unread_increment,
        )
        remaining = conversations[:index] + conversations[index + 1:]
        logger.debug(
            f"Appended message {record.id} to conversation {existing.id} "
            f"({len(updated.messages)} messages, {updated.unread_count} unread)"
        )
        return [updated] + remaining, updated

    contact_name = (resolve_name or _identity)(record.sender) or record.sender
    created = Conversation(
        id=new_id(),
        contact_name=contact_name,
        phone_number=record.sender,
        messages=[record],
        unread_count=unread_increment,
    )
    logger.debug(f"Created conversation {created.id} for sender {contact_name}")
    return [created] + list(conversations), created


def mark_read(conversations: List[Conversation], conversation_id: str) -> List[Conversation]:
    """Reset the unread count of one conversation.

    Unknown ids leave the list unchanged.
    """
    result = []
    for conversation in conversations:
        if conversation.id == conversation_id and conversation.unread_count != 0:
            conversation = replace(conversation, unread_count=0)
        result.append(conversation)
    return result


def reclassify(conversations: List[Conversation],
               conversation_id: str,
               record_id: str,
               new_result: ClassificationResult) -> List[Conversation]:
    """Replace the classification of one stored record.

    The record is looked up across all conversations; ``conversation_id`` is
    only a hint and may be stale. Only ``result`` changes, every other field
    of the record is carried over. An unknown record id is a silent no-op.
    """
    for index, conversation in enumerate(conversations):
        position, record = conversation.find_message(record_id)
        if record is None:
            continue

        if conversation.id != conversation_id:
            logger.debug(
                f"Record {record_id} found in conversation {conversation.id}, "
                f"not the requested {conversation_id}"
            )

        messages = list(conversation.messages)
        messages[position] = replace(record, result=new_result)
        result = list(conversations)
        result[index] = replace(conversation, messages=messages)
        return result

    logger.debug(f"Record {record_id} not found, nothing to reclassify")
    return list(conversations)


def merge_duplicate_senders(conversations: List[Conversation]) -> Tuple[List[Conversation], int]:
    """Fold conversations that share a phone number into one.

    The first (most recently active) conversation for a sender keeps its id,
    name and position; later ones contribute their messages and unread
    counts. Merged messages are ordered newest first by timestamp.

    Returns:
        Tuple of (conversations with unique phone numbers, number merged away)
    """
    result: List[Conversation] = []
    positions = {}
    merged = 0

    for conversation in conversations:
        index = positions.get(conversation.phone_number)
        if index is None:
            positions[conversation.phone_number] = len(result)
            result.append(conversation)
            continue

        kept = result[index]
        messages = sorted(
            list(kept.messages) + list(conversation.messages),
            key=lambda record: record.timestamp,
            reverse=True,
        )
        result[index] = replace(
            kept,
            messages=messages,
            unread_count=kept.unread_count + conversation.unread_count,
        )
        merged += 1
        logger.debug(f"Merged conversation {conversation.id} into {kept.id} ({kept.phone_number})")

    return result, merged


def clear_all() -> List[Conversation]:
    """Empty conversation list."""
    return []


def filter_conversations(conversations: List[Conversation],
                         query: str = "",
                         category: Union[MessageType, str] = ALL_CATEGORIES) -> List[Conversation]:
    """Search conversations without changing them.

    A conversation is kept when ``query`` is a case-insensitive substring of
    its contact name, phone number or last message text, and ``category`` is
    ALL or equals the category of its last message. Input order is preserved.
    """
    needle = (query or "").lower()
    wanted = None
    if isinstance(category, MessageType):
        wanted = category
    elif category and category.strip().upper() != ALL_CATEGORIES:
        wanted = MessageType.from_token(category)

    def matches(conversation: Conversation) -> bool:
        last = conversation.last_message
        if needle and not (
            needle in conversation.contact_name.lower()
            or needle in conversation.phone_number.lower()
            or needle in last.text.lower()
        ):
            return False
        return wanted is None or last.result.category is wanted

    return [conversation for conversation in conversations if matches(conversation)]
