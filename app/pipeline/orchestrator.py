"""
Analysis orchestrator: connects the rule engines to a result sink.

Stages for a stored document: LOAD → DETECT → CLASSIFY → PERSIST

The engines are pure; everything here that can fail is sink I/O, and sink
errors propagate to the caller unchanged.
"""

import time
from typing import Optional

import structlog

from app.models.enums import DocCategory
from app.observability.logging import document_context
from app.observability.metrics import (
    analysis_duration_seconds,
    classification_confidence,
    documents_classified_total,
    risk_flags_detected_total,
    risk_flags_resolved_total,
)
from app.pipeline.doc_classifier import apply_manual_override, classify
from app.pipeline.risk_detector import detect_risks, summarize_risks
from app.schemas.contracts import (
    CamelModel,
    CategoryDraft,
    CategoryRecord,
    RiskFlagDraft,
    RiskFlagRecord,
    RiskSummary,
    SuggestedWorkflow,
)
from app.storage.base import CategoryNotFoundError, ResultSink

logger = structlog.get_logger(__name__)


class AnalysisResult(CamelModel):
    document_id: str
    risk_flags: list[RiskFlagRecord]
    category: CategoryRecord
    duration_ms: int


def record_detected(drafts: list[RiskFlagDraft]) -> None:
    for d in drafts:
        risk_flags_detected_total.labels(risk_type=d.risk_type.value, severity=d.severity.value).inc()


def record_classified(draft: CategoryDraft) -> None:
    documents_classified_total.labels(
        category=draft.category.value,
        auto_detected=str(draft.auto_detected).lower(),
    ).inc()
    if draft.auto_detected:
        classification_confidence.labels(category=draft.category.value).observe(draft.confidence_score)


def preview_risks(document_text: str) -> list[RiskFlagDraft]:
    """Run the risk engine without persisting anything."""
    with analysis_duration_seconds.labels(stage="detect").time():
        drafts = detect_risks(document_text)
    record_detected(drafts)
    return drafts


def preview_category(document_text: str) -> CategoryDraft:
    """Run the category engine without persisting anything."""
    with analysis_duration_seconds.labels(stage="classify").time():
        draft = classify(document_text)
    return draft


class DocumentAnalyzer:
    """
    Runs both engines for a document held by the sink and stores the results.
    One call per document; holds no per-document state between calls.
    """

    def __init__(self, sink: ResultSink):
        self.sink = sink

    async def analyze_risks(self, document_id: str, content: Optional[str] = None) -> list[RiskFlagRecord]:
        """
        Detect and store risk flags. An empty result is stored as nothing
        and returned as an empty list.
        """
        with document_context(document_id):
            if content is None:
                content = (await self.sink.get_document(document_id)).content
            else:
                # Validate ownership before doing any work
                await self.sink.get_document(document_id)

            drafts = preview_risks(content)
            if not drafts:
                logger.info("no_risks_detected")
                return []

            with analysis_duration_seconds.labels(stage="persist").time():
                records = await self.sink.create_risk_flags(document_id, drafts)

            logger.info(
                "risks_detected",
                count=len(records),
                severities=[r.severity.value for r in records],
            )
            return records

    async def categorize(self, document_id: str, content: Optional[str] = None) -> CategoryRecord:
        """Classify and replace the stored category."""
        with document_context(document_id):
            if content is None:
                content = (await self.sink.get_document(document_id)).content

            draft = preview_category(content)
            with analysis_duration_seconds.labels(stage="persist").time():
                record = await self.sink.upsert_category(document_id, draft)
            record_classified(draft)

            logger.info(
                "document_categorized",
                category=record.category.value,
                subcategory=record.subcategory,
                confidence=record.confidence_score,
            )
            return record

    async def analyze(self, document_id: str) -> AnalysisResult:
        """Full pass: LOAD → DETECT → CLASSIFY → PERSIST."""
        started_at = time.time()

        with document_context(document_id):
            logger.info("analysis_started")
            doc = await self.sink.get_document(document_id)
            flags = await self.analyze_risks(document_id, content=doc.content)
            category = await self.categorize(document_id, content=doc.content)

            duration_ms = int((time.time() - started_at) * 1000)
            logger.info(
                "analysis_completed",
                risk_count=len(flags),
                category=category.category.value,
                duration_ms=duration_ms,
            )

        return AnalysisResult(
            document_id=str(document_id),
            risk_flags=flags,
            category=category,
            duration_ms=duration_ms,
        )

    async def override_category(
        self,
        document_id: str,
        category: DocCategory,
        subcategory: Optional[str] = None,
        suggested_workflow: Optional[SuggestedWorkflow] = None,
    ) -> CategoryRecord:
        """Apply a user's category choice to the stored record."""
        with document_context(document_id):
            current = await self.sink.get_category(document_id)
            if current is None:
                raise CategoryNotFoundError(str(document_id))

            draft = apply_manual_override(current, category, subcategory, suggested_workflow)
            record = await self.sink.upsert_category(document_id, draft)
            record_classified(draft)

            logger.info(
                "category_overridden",
                previous=current.category.value,
                category=record.category.value,
            )
            return record

    async def resolve_risk(self, flag_id: str) -> RiskFlagRecord:
        record = await self.sink.resolve_risk_flag(flag_id)
        risk_flags_resolved_total.inc()
        return record

    async def summarize(self, document_id: str) -> RiskSummary:
        await self.sink.get_document(document_id)
        return summarize_risks(await self.sink.list_risk_flags(document_id))
