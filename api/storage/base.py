"""Abstract session store interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from fieldmap.session import AnalyticsSession


class SessionStore(ABC):
    """Abstract store for analytics sessions, keyed by session id."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[AnalyticsSession]:
        """
        Get a session.

        Args:
            session_id: Session identifier

        Returns:
            The session, or None if it does not exist
        """
        pass

    @abstractmethod
    def put(self, session: AnalyticsSession) -> None:
        """
        Store a session under its session_id, replacing any existing one.

        Args:
            session: Session to store
        """
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """
        Remove a session.

        Args:
            session_id: Session identifier

        Returns:
            True if a session was removed, False if it did not exist
        """
        pass

    @abstractmethod
    def list_ids(self) -> List[str]:
        """
        List stored session ids, least recently used first.

        Returns:
            List of session ids
        """
        pass
