"""
/api/v1/risks endpoints.
Run the risk rule engine, list stored flags, resolve flags.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.errors import check_content_size, sink_http_error
from app.dependencies import get_analyzer, get_result_sink, verify_api_key
from app.pipeline.orchestrator import DocumentAnalyzer, preview_risks
from app.schemas.contracts import RiskFlagRecord, RiskSummary
from app.schemas.risks import RiskAnalyzeRequest, RiskAnalyzeResponse
from app.storage.base import ResultSink, SinkError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/risks", tags=["risks"], dependencies=[Depends(verify_api_key)])


def _message(count: int) -> str:
    if count == 0:
        return "No risks detected. Document appears to be well-structured."
    return f"{count} potential risk(s) detected."


@router.get("", response_model=list[RiskFlagRecord])
async def list_risks(
    document_id: str = Query(..., alias="documentId"),
    include_resolved: bool = Query(True, alias="includeResolved"),
    sink: ResultSink = Depends(get_result_sink),
):
    """Stored flags for a document in detection order."""
    try:
        await sink.get_document(document_id)
        return await sink.list_risk_flags(document_id, include_resolved=include_resolved)
    except SinkError as e:
        raise sink_http_error(e)


@router.get("/summary", response_model=RiskSummary)
async def risk_summary(
    document_id: str = Query(..., alias="documentId"),
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
):
    """Active/resolved counts for a document."""
    try:
        return await analyzer.summarize(document_id)
    except SinkError as e:
        raise sink_http_error(e)


@router.post("/analyze", response_model=RiskAnalyzeResponse)
async def analyze_risks(
    body: RiskAnalyzeRequest,
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
):
    """
    Detect risks. Stores flags when document_id is given; otherwise
    returns drafts only.
    """
    check_content_size(body.content)

    if body.document_id is None:
        if body.content is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Either documentId or content is required",
            )
        drafts = preview_risks(body.content)
        logger.info("risks_previewed", count=len(drafts))
        return RiskAnalyzeResponse(
            persisted=False,
            risk_count=len(drafts),
            drafts=drafts,
            message=_message(len(drafts)),
        )

    try:
        records = await analyzer.analyze_risks(body.document_id, content=body.content)
    except SinkError as e:
        raise sink_http_error(e)

    return RiskAnalyzeResponse(
        document_id=body.document_id,
        persisted=True,
        risk_count=len(records),
        risk_flags=records,
        message=_message(len(records)),
    )


@router.patch("/{flag_id}/resolve", response_model=RiskFlagRecord)
async def resolve_risk(
    flag_id: str,
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
):
    """Mark a flag as resolved. Resolving twice is a no-op."""
    try:
        return await analyzer.resolve_risk(flag_id)
    except SinkError as e:
        raise sink_http_error(e)
