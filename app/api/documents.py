"""
/api/v1/documents endpoints.
Stores extracted document text and runs full analysis over it.
"""

import structlog
from fastapi import APIRouter, Depends, Query, status

from app.api.errors import check_content_size, sink_http_error
from app.dependencies import get_analyzer, get_result_sink, verify_api_key
from app.pipeline.orchestrator import AnalysisResult, DocumentAnalyzer
from app.schemas.documents import (
    DocumentCreateRequest,
    DocumentDetail,
    DocumentListResponse,
    DocumentSummary,
)
from app.storage.base import ResultSink, SinkError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/documents", tags=["documents"], dependencies=[Depends(verify_api_key)])


@router.post("", response_model=DocumentDetail, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentCreateRequest,
    sink: ResultSink = Depends(get_result_sink),
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
):
    """Store extracted text. Optionally analyse it straight away."""
    check_content_size(body.content)

    try:
        doc = await sink.create_document(body.title, body.content)
        if not body.analyze:
            return DocumentDetail(id=doc.id, title=doc.title, content=doc.content, created_at=doc.created_at)

        result = await analyzer.analyze(doc.id)
    except SinkError as e:
        raise sink_http_error(e)

    return DocumentDetail(
        id=doc.id,
        title=doc.title,
        content=doc.content,
        created_at=doc.created_at,
        risk_flags=result.risk_flags,
        category=result.category,
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    sink: ResultSink = Depends(get_result_sink),
):
    """List documents, newest first."""
    try:
        docs, total = await sink.list_documents(limit=limit, offset=offset)
    except SinkError as e:
        raise sink_http_error(e)

    return DocumentListResponse(
        documents=[
            DocumentSummary(
                id=d.id,
                title=d.title,
                content_length=len(d.content),
                created_at=d.created_at,
            )
            for d in docs
        ],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{document_id}", response_model=DocumentDetail)
async def get_document(
    document_id: str,
    sink: ResultSink = Depends(get_result_sink),
):
    """Document text plus its stored flags and category."""
    try:
        doc = await sink.get_document(document_id)
        flags = await sink.list_risk_flags(document_id)
        category = await sink.get_category(document_id)
    except SinkError as e:
        raise sink_http_error(e)

    return DocumentDetail(
        id=doc.id,
        title=doc.title,
        content=doc.content,
        created_at=doc.created_at,
        risk_flags=flags,
        category=category,
    )


@router.post("/{document_id}/analyze", response_model=AnalysisResult)
async def analyze_document(
    document_id: str,
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
):
    """Run the risk and category engines over the stored text."""
    try:
        return await analyzer.analyze(document_id)
    except SinkError as e:
        raise sink_http_error(e)
