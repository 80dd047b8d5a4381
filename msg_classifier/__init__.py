"""MsgClassifier - LLM-classified messaging inbox with per-sender conversations."""

__version__ = "1.0.0"
