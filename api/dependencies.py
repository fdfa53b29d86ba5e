"""FastAPI dependencies for the session store and services."""

from functools import lru_cache

from api.services.session_service import SessionService
from api.storage import SessionStore, get_session_store
from fieldmap.catalog import FieldCatalog, get_default_catalog


@lru_cache()
def get_session_store_cached() -> SessionStore:
    """Get cached process-wide session store."""
    return get_session_store()


def get_session_service() -> SessionService:
    """
    Get session service instance.

    Returns:
        SessionService instance
    """
    return SessionService(store=get_session_store_cached())


def get_catalog() -> FieldCatalog:
    """
    Get the field catalog.

    Returns:
        FieldCatalog instance
    """
    return get_default_catalog()
