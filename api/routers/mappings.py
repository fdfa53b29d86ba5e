"""Column mappings API router."""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_session_service
from api.models.requests import OverrideMappingRequest
from api.models.responses import MappingsResponse
from api.services.session_service import SessionService

router = APIRouter(prefix="/api/v1", tags=["mappings"])


@router.get("/datasets/{session_id}/mappings", response_model=MappingsResponse)
def get_mappings(
    session_id: str,
    include_candidates: bool = Query(False, description="Attach each column's top candidate fields"),
    session_service: SessionService = Depends(get_session_service),
):
    """
    Get the column mappings of a session.

    Args:
        session_id: Session identifier
        include_candidates: Attach scored candidates per column
        session_service: Session service dependency

    Returns:
        Mappings in column order
    """
    session = session_service.get_session(session_id)
    return MappingsResponse(
        session_id=session_id,
        mappings=session_service.describe_mappings(session, include_candidates=include_candidates),
    )


@router.put("/datasets/{session_id}/mappings/{column_name:path}", response_model=MappingsResponse)
def override_mapping(
    session_id: str,
    column_name: str,
    request: OverrideMappingRequest,
    session_service: SessionService = Depends(get_session_service),
):
    """
    Override one column's mapping and recompute metrics.

    A null field_id unmaps the column. A column that previously held the
    field becomes unmapped.

    Raises:
        SessionNotFoundError: If the session does not exist (404)
        UnknownColumnError: If the column is not in the dataset (404)
        UnknownFieldError: If the field is not in the catalog (404)
    """
    session = session_service.get_session(session_id)
    session.override(column_name, request.field_id)
    return MappingsResponse(
        session_id=session_id,
        mappings=session_service.describe_mappings(session),
    )
