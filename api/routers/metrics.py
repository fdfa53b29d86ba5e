"""Metrics API router."""

from fastapi import APIRouter, Depends

from api.dependencies import get_session_service
from api.models.responses import FieldValuesResponse, MetricsResponse
from api.services.session_service import SessionService

router = APIRouter(prefix="/api/v1", tags=["metrics"])


@router.get("/datasets/{session_id}/metrics", response_model=MetricsResponse)
def get_metrics(session_id: str, session_service: SessionService = Depends(get_session_service)):
    """
    Get the metrics of a session's current dataset.

    Raises:
        SessionNotFoundError: If the session does not exist (404)
    """
    session = session_service.get_session(session_id)
    return MetricsResponse(session_id=session_id, metrics=session.metrics.to_dict())


@router.get("/datasets/{session_id}/fields/{field_id}/values", response_model=FieldValuesResponse)
def get_field_values(
    session_id: str,
    field_id: str,
    session_service: SessionService = Depends(get_session_service),
):
    """
    Get the normalized values of one business field.

    Unmapped fields return an empty list.

    Raises:
        SessionNotFoundError: If the session does not exist (404)
        UnknownFieldError: If the field is not in the catalog (404)
    """
    session = session_service.get_session(session_id)
    return FieldValuesResponse(session_id=session_id, **session_service.field_values(session, field_id))
