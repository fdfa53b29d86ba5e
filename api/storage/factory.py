"""Session store factory."""

from api.storage.base import SessionStore
from api.storage.memory import InMemorySessionStore
from fieldmap.config import get_config


def get_session_store() -> SessionStore:
    """
    Get session store based on configuration.

    Configuration via environment variables:
    - STORAGE_TYPE: "memory" (default: "memory")
    - MAX_SESSIONS: Sessions kept before LRU eviction (default: 100)

    Returns:
        Session store instance

    Raises:
        ValueError: If storage type is invalid
    """
    config = get_config()

    storage_type = getattr(config, "storage_type", "memory")

    if storage_type == "memory":
        return InMemorySessionStore(max_sessions=config.max_sessions)

    raise ValueError(f"Unknown storage type: {storage_type}. Must be 'memory'")
