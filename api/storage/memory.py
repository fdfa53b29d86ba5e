"""In-memory session store with LRU eviction."""

import logging
import threading
from collections import OrderedDict
from typing import List, Optional

from api.storage.base import SessionStore
from fieldmap.session import AnalyticsSession

logger = logging.getLogger(__name__)


class InMemorySessionStore(SessionStore):
    """Session store kept in process memory, limited to max_sessions entries."""

    def __init__(self, max_sessions: int = 100):
        """
        Initialize the store.

        Args:
            max_sessions: Maximum number of sessions kept
        """
        self._sessions: OrderedDict[str, AnalyticsSession] = OrderedDict()
        self.max_sessions = max_sessions
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[AnalyticsSession]:
        with self._lock:
            if session_id in self._sessions:
                # Move to end (most recently used)
                self._sessions.move_to_end(session_id)
                return self._sessions[session_id]
        return None

    def put(self, session: AnalyticsSession) -> None:
        with self._lock:
            if session.session_id in self._sessions:
                self._sessions.move_to_end(session.session_id)
            self._sessions[session.session_id] = session

            # Evict oldest session if store is full
            if len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info(f"Evicted session {evicted_id}")

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
