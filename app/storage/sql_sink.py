"""
SQLAlchemy-backed result sink.
Each operation runs in its own session/transaction, so a failed batch
leaves previously stored rows untouched.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import func, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.tables import Document, DocumentCategory, RiskFlag
from app.schemas.contracts import (
    CategoryDraft,
    CategoryRecord,
    DocumentRecord,
    RiskFlagDraft,
    RiskFlagRecord,
)
from app.storage.base import (
    DocumentNotFoundError,
    ResultSink,
    RiskFlagNotFoundError,
    SinkError,
    stored_confidence,
)

logger = structlog.get_logger(__name__)


def _as_uuid(value: str, not_found: type[SinkError]) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise not_found(str(value))


_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _dialect_insert(session: AsyncSession):
    """INSERT construct with ON CONFLICT support for the bound database."""
    dialect = session.get_bind().dialect.name
    try:
        return _INSERTS[dialect]
    except KeyError:
        raise SinkError(f"Upsert not supported on dialect: {dialect}")


# ── Row → record mapping ─────────────────────────────────────

def document_to_record(row: Document) -> DocumentRecord:
    return DocumentRecord(
        id=str(row.doc_id),
        title=row.title,
        content=row.content,
        created_at=row.created_at,
    )


def flag_to_record(row: RiskFlag) -> RiskFlagRecord:
    return RiskFlagRecord(
        id=str(row.flag_id),
        document_id=str(row.doc_id),
        risk_type=row.risk_type,
        severity=row.severity,
        description=row.description,
        affected_text=row.affected_text,
        explanation=row.explanation,
        suggestions=row.suggestions,
        is_resolved=row.is_resolved,
        created_at=row.created_at,
    )


def category_to_record(row: DocumentCategory) -> CategoryRecord:
    return CategoryRecord(
        id=str(row.category_id),
        document_id=str(row.doc_id),
        category=row.category,
        subcategory=row.subcategory,
        confidence_score=row.confidence_score,
        suggested_workflow=row.suggested_workflow,
        auto_detected=row.auto_detected,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlResultSink(ResultSink):
    """Persist analysis results through an async SQLAlchemy session factory."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        if session_factory is None:
            from app.models.database import async_session_factory
            session_factory = async_session_factory
        self._session_factory = session_factory

    @property
    def sink_name(self) -> str:
        return "sql"

    async def _load_document(self, session: AsyncSession, document_id: str) -> Document:
        doc = await session.get(Document, _as_uuid(document_id, DocumentNotFoundError))
        if doc is None:
            raise DocumentNotFoundError(str(document_id))
        return doc

    # ── Documents ────────────────────────────────────────────

    async def create_document(self, title: str, content: str) -> DocumentRecord:
        try:
            async with self._session_factory() as session, session.begin():
                doc = Document(
                    doc_id=uuid.uuid4(),
                    title=title,
                    content=content,
                    created_at=datetime.now(timezone.utc),
                )
                session.add(doc)
                await session.flush()
                record = document_to_record(doc)
        except SQLAlchemyError as e:
            logger.error("document_create_failed", error=str(e))
            raise SinkError(f"Failed to store document: {e}") from e

        logger.info("document_created", document_id=record.id, sink=self.sink_name, chars=len(content))
        return record

    async def get_document(self, document_id: str) -> DocumentRecord:
        try:
            async with self._session_factory() as session:
                return document_to_record(await self._load_document(session, document_id))
        except SQLAlchemyError as e:
            logger.error("document_read_failed", document_id=str(document_id), error=str(e))
            raise SinkError(f"Failed to read document: {e}") from e

    async def list_documents(self, limit: int = 50, offset: int = 0) -> tuple[list[DocumentRecord], int]:
        try:
            async with self._session_factory() as session:
                total = (await session.execute(select(func.count(Document.doc_id)))).scalar() or 0
                result = await session.execute(
                    select(Document).order_by(Document.created_at.desc()).offset(offset).limit(limit)
                )
                return [document_to_record(d) for d in result.scalars().all()], total
        except SQLAlchemyError as e:
            logger.error("document_list_failed", error=str(e))
            raise SinkError(f"Failed to list documents: {e}") from e

    # ── Risk flags ───────────────────────────────────────────

    async def create_risk_flags(
        self, document_id: str, drafts: list[RiskFlagDraft]
    ) -> list[RiskFlagRecord]:
        try:
            async with self._session_factory() as session, session.begin():
                doc = await self._load_document(session, document_id)
                created_at = datetime.now(timezone.utc)
                rows = [
                    RiskFlag(
                        flag_id=uuid.uuid4(),
                        doc_id=doc.doc_id,
                        batch_index=i,
                        risk_type=draft.risk_type,
                        severity=draft.severity,
                        description=draft.description,
                        affected_text=draft.affected_text,
                        explanation=draft.explanation,
                        suggestions=list(draft.suggestions),
                        is_resolved=False,
                        created_at=created_at,
                    )
                    for i, draft in enumerate(drafts)
                ]
                session.add_all(rows)
                await session.flush()
                records = [flag_to_record(r) for r in rows]
        except SQLAlchemyError as e:
            logger.error("risk_flags_create_failed", document_id=str(document_id), error=str(e))
            raise SinkError(f"Failed to store risk flags: {e}") from e

        logger.info("risk_flags_created", document_id=str(document_id), count=len(records), sink=self.sink_name)
        return records

    async def list_risk_flags(
        self, document_id: str, include_resolved: bool = True
    ) -> list[RiskFlagRecord]:
        doc_uuid = _as_uuid(document_id, DocumentNotFoundError)
        query = select(RiskFlag).where(RiskFlag.doc_id == doc_uuid)
        if not include_resolved:
            query = query.where(RiskFlag.is_resolved.is_(False))
        query = query.order_by(RiskFlag.created_at, RiskFlag.batch_index)

        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [flag_to_record(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("risk_flags_read_failed", document_id=str(document_id), error=str(e))
            raise SinkError(f"Failed to read risk flags: {e}") from e

    async def resolve_risk_flag(self, flag_id: str) -> RiskFlagRecord:
        try:
            async with self._session_factory() as session, session.begin():
                row = await session.get(RiskFlag, _as_uuid(flag_id, RiskFlagNotFoundError))
                if row is None:
                    raise RiskFlagNotFoundError(str(flag_id))
                row.is_resolved = True
                await session.flush()
                record = flag_to_record(row)
        except SQLAlchemyError as e:
            logger.error("risk_flag_resolve_failed", flag_id=str(flag_id), error=str(e))
            raise SinkError(f"Failed to resolve risk flag: {e}") from e

        logger.info("risk_flag_resolved", flag_id=record.id, document_id=record.document_id)
        return record

    # ── Categories ───────────────────────────────────────────

    async def get_category(self, document_id: str) -> Optional[CategoryRecord]:
        doc_uuid = _as_uuid(document_id, DocumentNotFoundError)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(DocumentCategory).where(DocumentCategory.doc_id == doc_uuid)
                )
                row = result.scalar_one_or_none()
                return category_to_record(row) if row else None
        except SQLAlchemyError as e:
            logger.error("category_read_failed", document_id=str(document_id), error=str(e))
            raise SinkError(f"Failed to read category: {e}") from e

    async def upsert_category(self, document_id: str, draft: CategoryDraft) -> CategoryRecord:
        workflow = draft.suggested_workflow.model_dump(mode="json", by_alias=True) if draft.suggested_workflow else None
        now = datetime.now(timezone.utc)
        new_id = uuid.uuid4()

        try:
            async with self._session_factory() as session, session.begin():
                doc = await self._load_document(session, document_id)
                insert = _dialect_insert(session)
                stmt = insert(DocumentCategory).values(
                    category_id=new_id,
                    doc_id=doc.doc_id,
                    category=draft.category,
                    subcategory=draft.subcategory,
                    confidence_score=stored_confidence(draft),
                    suggested_workflow=workflow,
                    auto_detected=draft.auto_detected,
                    created_at=now,
                    updated_at=now,
                )
                # Concurrent writers for one document resolve on the unique
                # doc_id; the row keeps its id and created_at.
                stmt = stmt.on_conflict_do_update(
                    index_elements=["doc_id"],
                    set_={
                        "category": stmt.excluded.category,
                        "subcategory": stmt.excluded.subcategory,
                        "confidence_score": stmt.excluded.confidence_score,
                        "suggested_workflow": stmt.excluded.suggested_workflow,
                        "auto_detected": stmt.excluded.auto_detected,
                        "updated_at": stmt.excluded.updated_at,
                    },
                )
                await session.execute(stmt)
                result = await session.execute(
                    select(DocumentCategory)
                    .where(DocumentCategory.doc_id == doc.doc_id)
                    .execution_options(populate_existing=True)
                )
                row = result.scalar_one()
                replaced = row.category_id != new_id
                record = category_to_record(row)
        except SQLAlchemyError as e:
            logger.error("category_upsert_failed", document_id=str(document_id), error=str(e))
            raise SinkError(f"Failed to store category: {e}") from e

        logger.info(
            "category_upserted",
            document_id=str(document_id),
            category=record.category.value,
            auto_detected=record.auto_detected,
            replaced=replaced,
        )
        return record

    async def health_check(self) -> bool:
        try:
            async with self._session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.warning("sink_unreachable", sink=self.sink_name, error=str(e)[:200])
            return False
