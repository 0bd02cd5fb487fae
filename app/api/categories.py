"""
/api/v1/categories endpoints.
Classify documents, read the stored category, apply manual overrides.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.errors import check_content_size, sink_http_error
from app.dependencies import get_analyzer, get_result_sink, verify_api_key
from app.pipeline.orchestrator import DocumentAnalyzer, preview_category
from app.schemas.categories import (
    CategoryClassifyRequest,
    CategoryClassifyResponse,
    CategoryOverrideRequest,
)
from app.schemas.contracts import CategoryRecord
from app.storage.base import CategoryNotFoundError, ResultSink, SinkError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/categories", tags=["categories"], dependencies=[Depends(verify_api_key)])


@router.get("", response_model=CategoryRecord)
async def get_category(
    document_id: str = Query(..., alias="documentId"),
    sink: ResultSink = Depends(get_result_sink),
):
    """Stored category; 404 when the document has not been classified yet."""
    try:
        await sink.get_document(document_id)
        category = await sink.get_category(document_id)
    except SinkError as e:
        raise sink_http_error(e)

    if category is None:
        raise sink_http_error(CategoryNotFoundError(document_id))
    return category


@router.post("/classify", response_model=CategoryClassifyResponse)
async def classify_document(
    body: CategoryClassifyRequest,
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
):
    """
    Classify text. Replaces the stored category when document_id is given;
    otherwise returns the draft only.
    """
    check_content_size(body.content)

    if body.document_id is None:
        if body.content is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Either documentId or content is required",
            )
        draft = preview_category(body.content)
        logger.info("category_previewed", category=draft.category.value)
        return CategoryClassifyResponse(persisted=False, draft=draft, label=draft.category.label)

    try:
        record = await analyzer.categorize(body.document_id, content=body.content)
    except SinkError as e:
        raise sink_http_error(e)

    return CategoryClassifyResponse(
        document_id=body.document_id,
        persisted=True,
        category=record,
        label=record.category.label,
    )


@router.patch("", response_model=CategoryRecord)
async def override_category(
    body: CategoryOverrideRequest,
    document_id: str = Query(..., alias="documentId"),
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
):
    """Manual override: confidence becomes 1.0 and autoDetected false."""
    try:
        return await analyzer.override_category(
            document_id,
            body.category,
            subcategory=body.subcategory,
            suggested_workflow=body.suggested_workflow,
        )
    except SinkError as e:
        raise sink_http_error(e)
