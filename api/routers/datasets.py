"""Datasets API router."""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from api.dependencies import get_session_service
from api.exceptions import UploadTooLargeError
from api.models.requests import CreateDatasetRequest
from api.models.responses import CreateDatasetResponse, DatasetSummary, DeleteSessionResponse
from api.services.session_service import SessionService
from fieldmap.config import get_config
from fieldmap.session import AnalyticsSession
from fieldmap.utils.file_reader import read_tabular

router = APIRouter(prefix="/api/v1", tags=["datasets"])


def _created_response(session: AnalyticsSession) -> CreateDatasetResponse:
    summary = SessionService.summarize(session)
    return CreateDatasetResponse(
        session_id=session.session_id,
        dataset=DatasetSummary(**summary),
        mappings=SessionService.describe_mappings(session),
        metrics=session.metrics.to_dict(),
    )


@router.get("/datasets", response_model=List[DatasetSummary])
def get_datasets(session_service: SessionService = Depends(get_session_service)):
    """
    List loaded datasets.

    Args:
        session_service: Session service dependency

    Returns:
        List of dataset summaries
    """
    return [DatasetSummary(**s) for s in session_service.list_sessions()]


@router.post("/datasets/upload", response_model=CreateDatasetResponse, status_code=201)
async def upload_dataset(
    file: UploadFile = File(..., description="CSV, TSV, Excel or JSON file"),
    session_service: SessionService = Depends(get_session_service),
):
    """
    Upload a file, map its columns and compute metrics in a new session.

    Args:
        file: Uploaded tabular file
        session_service: Session service dependency

    Returns:
        Session id, dataset summary, mappings and metrics

    Raises:
        UnsupportedFileTypeError: If the extension is not supported (415)
        FileDecodeError: If the content cannot be parsed (400)
        UploadTooLargeError: If the file exceeds MAX_UPLOAD_MB (413)
    """
    content = await file.read()
    max_bytes = get_config().max_upload_bytes
    if len(content) > max_bytes:
        raise UploadTooLargeError(f"File exceeds the upload limit of {max_bytes} bytes")

    rows, columns = read_tabular(file.filename or "", content)
    session = session_service.create_session(file.filename or "upload", rows, columns)
    return _created_response(session)


@router.post("/datasets", response_model=CreateDatasetResponse, status_code=201)
def create_dataset(
    request: CreateDatasetRequest,
    session_service: SessionService = Depends(get_session_service),
):
    """
    Load rows provided as JSON into a new session.

    Args:
        request: File name, rows and optional column order
        session_service: Session service dependency

    Returns:
        Session id, dataset summary, mappings and metrics
    """
    session = session_service.create_session(request.file_name, request.rows, request.columns)
    return _created_response(session)


@router.get("/datasets/{session_id}", response_model=DatasetSummary)
def get_dataset(session_id: str, session_service: SessionService = Depends(get_session_service)):
    """
    Get the dataset summary of a session.

    Raises:
        SessionNotFoundError: If the session does not exist (404)
    """
    session = session_service.get_session(session_id)
    return DatasetSummary(**session_service.summarize(session))


@router.delete("/datasets/{session_id}", response_model=DeleteSessionResponse)
def delete_dataset(session_id: str, session_service: SessionService = Depends(get_session_service)):
    """
    Discard a session and its dataset.

    Raises:
        SessionNotFoundError: If the session does not exist (404)
    """
    session_service.delete_session(session_id)
    return DeleteSessionResponse(session_id=session_id, deleted=True)
