"""Storage abstraction layer for analytics sessions."""

from api.storage.base import SessionStore
from api.storage.factory import get_session_store
from api.storage.memory import InMemorySessionStore

__all__ = [
    "SessionStore",
    "InMemorySessionStore",
    "get_session_store",
]
