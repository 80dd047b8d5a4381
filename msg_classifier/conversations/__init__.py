"""
Conversations module for MsgClassifier.

Groups classified message records into per-sender conversations and owns the
conversation list for a session.
"""

from .models import Conversation, MessageRecord, conversations_from_json, conversations_to_json
from .builder import build_record
from .reconciler import (
    ALL_CATEGORIES,
    clear_all,
    filter_conversations,
    find_conversation_index,
    ingest,
    mark_read,
    merge_duplicate_senders,
    reclassify,
)

__all__ = [
    # Models
    'Conversation',
    'MessageRecord',
    'conversations_from_json',
    'conversations_to_json',

    # Record building
    'build_record',

    # Reconciliation
    'ALL_CATEGORIES',
    'clear_all',
    'filter_conversations',
    'find_conversation_index',
    'ingest',
    'mark_read',
    'merge_duplicate_senders',
    'reclassify',
]
