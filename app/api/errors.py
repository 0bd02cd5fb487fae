"""
Mapping from sink errors and oversized input to HTTP responses.
"""

from typing import Optional

import structlog
from fastapi import HTTPException, status

from app.config import settings
from app.storage.base import (
    CategoryNotFoundError,
    DocumentNotFoundError,
    RiskFlagNotFoundError,
    SinkError,
)

logger = structlog.get_logger(__name__)

_NOT_FOUND = (DocumentNotFoundError, RiskFlagNotFoundError, CategoryNotFoundError)


def sink_http_error(err: SinkError) -> HTTPException:
    """404 for missing records, 503 for anything else the sink raises."""
    if isinstance(err, _NOT_FOUND):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=err.message)

    logger.error("sink_error", error_code=err.error_code, error=err.message)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Result store unavailable: {err.message}",
    )


def check_content_size(content: Optional[str]) -> None:
    """413 when submitted text exceeds MAX_DOCUMENT_CHARS."""
    if content is not None and len(content) > settings.MAX_DOCUMENT_CHARS:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Document too large: {len(content)} chars. Max: {settings.MAX_DOCUMENT_CHARS}",
        )
