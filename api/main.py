"""FastAPI application for the field mapping backend."""

import logging
from typing import Dict, List, Type

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.exceptions import SessionNotFoundError, UploadTooLargeError
from api.routers import catalog, datasets, mappings, metrics
from fieldmap.config import get_config
from fieldmap.exceptions import (
    DatasetNotLoadedError,
    FileDecodeError,
    UnknownColumnError,
    UnknownFieldError,
    UnsupportedFileTypeError,
)

config = get_config()

logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Domain errors surfaced to clients, with the status each one maps to
ERROR_STATUS: Dict[Type[Exception], int] = {
    SessionNotFoundError: status.HTTP_404_NOT_FOUND,
    UnknownFieldError: status.HTTP_404_NOT_FOUND,
    UnknownColumnError: status.HTTP_404_NOT_FOUND,
    DatasetNotLoadedError: status.HTTP_409_CONFLICT,
    UnsupportedFileTypeError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    FileDecodeError: status.HTTP_400_BAD_REQUEST,
    UploadTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
}


def _parse_origins(raw: str) -> List[str]:
    """Split the comma-separated CORS_ORIGINS setting; empty means allow all."""
    origins = [origin.strip() for origin in (raw or "").split(",")]
    return [origin for origin in origins if origin] or ["*"]


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


async def domain_error_handler(request: Request, exc: Exception):
    """Translate a known domain error into its JSON error response."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return _error_response(status_code, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation errors; exception objects in the error context become strings."""
    errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
    logger.warning(f"Validation error on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors, "error_type": "ValidationError"},
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


app = FastAPI(
    title="Business Field Mapping API",
    description="Backend API for mapping business file columns to catalog fields and computing metrics",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_origins(config.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

for error_type in ERROR_STATUS:
    app.add_exception_handler(error_type, domain_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(catalog.router)
app.include_router(datasets.router)
app.include_router(mappings.router)
app.include_router(metrics.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": config.app_name, "version": API_VERSION, "docs": "/docs"}


@app.get("/health")
def health():
    return {"status": "healthy"}
