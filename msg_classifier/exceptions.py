"""
Custom exceptions for MsgClassifier.

Most failures in the inbox are absorbed where they happen (classification
falls back to UNKNOWN, unreadable history falls back to an empty inbox);
these types mark the places where that absorption happens.
"""


class InboxError(Exception):
    """Base exception for all inbox-related errors."""
    pass


class MessageValidationError(InboxError):
    """Raised when message text, sender or target conversation is rejected."""
    pass


class ClassificationError(InboxError):
    """Raised when an LLM response cannot be turned into a classification."""
    pass


class PersistenceError(InboxError):
    """Raised when a stored conversation snapshot cannot be read or written."""
    pass


class ConfigurationError(InboxError):
    """Raised when required configuration (e.g. an API key) is missing."""
    pass
