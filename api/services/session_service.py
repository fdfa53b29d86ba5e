"""Session service for loading files and querying analytics sessions."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from api.exceptions import SessionNotFoundError
from api.storage.base import SessionStore
from api.storage.factory import get_session_store
from fieldmap.config import get_config
from fieldmap.session import AnalyticsSession


class SessionService:
    """Manages analytics sessions with a configurable session store."""

    def __init__(self, store: Optional[SessionStore] = None):
        """
        Initialize session service.

        Args:
            store: Optional session store. If None, uses configured store.
        """
        self.store = store or get_session_store()

    def create_session(
        self,
        file_name: str,
        rows: Sequence[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
    ) -> AnalyticsSession:
        """
        Load rows into a new session and store it.

        Args:
            file_name: Source file name
            rows: Raw rows
            columns: Column order

        Returns:
            The new session
        """
        session = AnalyticsSession()
        session.load(file_name, rows, columns)
        self.store.put(session)
        return session

    def get_session(self, session_id: str) -> AnalyticsSession:
        """
        Get a stored session.

        Raises:
            SessionNotFoundError: If no session has this id
        """
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete_session(self, session_id: str) -> None:
        """
        Discard a session and its dataset.

        Raises:
            SessionNotFoundError: If no session has this id
        """
        if not self.store.delete(session_id):
            raise SessionNotFoundError(session_id)

    def list_sessions(self) -> List[Dict[str, Any]]:
        """Summaries of all stored sessions."""
        summaries = []
        for session_id in self.store.list_ids():
            session = self.store.get(session_id)
            if session is not None and session.is_loaded:
                summaries.append(self.summarize(session))
        return summaries

    @staticmethod
    def summarize(session: AnalyticsSession) -> Dict[str, Any]:
        """Dataset summary for a loaded session."""
        dataset = session.dataset
        return {
            "session_id": session.session_id,
            "file_name": dataset.file_name,
            "row_count": dataset.row_count,
            "columns": list(dataset.columns),
            "mapped_count": len(dataset.mapped_fields()),
            "unmapped_columns": list(dataset.unmapped_columns()),
        }

    @staticmethod
    def describe_mappings(session: AnalyticsSession, include_candidates: bool = False) -> List[Dict[str, Any]]:
        """
        Mappings of a session, optionally with each column's top candidates.

        Args:
            session: Loaded session
            include_candidates: Re-classify columns and attach candidates

        Returns:
            List of mapping dictionaries in column order
        """
        dataset = session.dataset
        mappings = [m.to_dict() for m in dataset.mappings]

        if include_candidates:
            pipeline = session.pipeline
            raw_columns = pipeline.build_raw_columns(dataset.data, dataset.columns)
            candidates = pipeline.classify_columns(raw_columns)
            by_column = {column.name: found for column, found in zip(raw_columns, candidates)}
            limit = get_config().max_candidates
            for mapping in mappings:
                mapping["candidates"] = [
                    {"field_id": c.field_id, "confidence": c.confidence, "reasons": sorted(c.reasons)}
                    for c in by_column.get(mapping["source_column"], ())[:limit]
                ]
        return mappings

    @staticmethod
    def field_values(session: AnalyticsSession, field_id: str) -> Dict[str, Any]:
        """
        Normalized values of one field.

        Raises:
            UnknownFieldError: If the field is not in the catalog
        """
        dataset = session.dataset
        normalized = dataset.normalized_column(field_id)
        if normalized is None:
            return {"field_id": field_id, "source_column": None, "values": [], "total": 0}

        values = normalized.valid_values
        return {
            "field_id": field_id,
            "source_column": normalized.source_column,
            "values": values,
            "total": len(values),
            "missing": normalized.missing,
            "skipped": normalized.skipped,
        }
