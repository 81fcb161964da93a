"""Conversation storage backends."""

from glowup.storage.message_store import InMemoryMessageStore, JsonlMessageStore, MessageStore

__all__ = ["InMemoryMessageStore", "JsonlMessageStore", "MessageStore"]
