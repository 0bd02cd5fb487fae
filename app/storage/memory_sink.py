"""
In-process result sink.
Keeps records in dicts; used by tests and for local runs with
RESULT_SINK=memory. Mutations are serialised with an asyncio.Lock.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from pydantic import ValidationError

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

_DRAFT_FIELDS = set(RiskFlagDraft.model_fields)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryResultSink(ResultSink):
    """Dict-backed sink. State lives only as long as the instance."""

    def __init__(self):
        self._documents: dict[str, DocumentRecord] = {}
        self._flags: dict[str, RiskFlagRecord] = {}
        self._categories: dict[str, CategoryRecord] = {}
        self._lock = asyncio.Lock()

    @property
    def sink_name(self) -> str:
        return "memory"

    def _require_document(self, document_id: str) -> None:
        if str(document_id) not in self._documents:
            raise DocumentNotFoundError(str(document_id))

    async def create_document(self, title: str, content: str) -> DocumentRecord:
        async with self._lock:
            doc = DocumentRecord(id=str(uuid.uuid4()), title=title, content=content, created_at=_now())
            self._documents[doc.id] = doc
        logger.info("document_created", document_id=doc.id, sink=self.sink_name, chars=len(content))
        return doc

    async def get_document(self, document_id: str) -> DocumentRecord:
        self._require_document(document_id)
        return self._documents[str(document_id)]

    async def list_documents(self, limit: int = 50, offset: int = 0) -> tuple[list[DocumentRecord], int]:
        newest_first = list(reversed(self._documents.values()))
        return newest_first[offset:offset + limit], len(newest_first)

    async def create_risk_flags(
        self, document_id: str, drafts: list[RiskFlagDraft]
    ) -> list[RiskFlagRecord]:
        async with self._lock:
            self._require_document(document_id)
            # Build the whole batch before touching stored state
            created_at = _now()
            try:
                records = [
                    RiskFlagRecord(
                        **draft.model_dump(include=_DRAFT_FIELDS),
                        id=str(uuid.uuid4()),
                        document_id=str(document_id),
                        is_resolved=False,
                        created_at=created_at,
                    )
                    for draft in drafts
                ]
            except ValidationError as e:
                logger.error("risk_flags_create_failed", document_id=str(document_id), error=str(e))
                raise SinkError(f"Failed to store risk flags: {e}") from e
            for record in records:
                self._flags[record.id] = record

        logger.info("risk_flags_created", document_id=str(document_id), count=len(records), sink=self.sink_name)
        return records

    async def list_risk_flags(
        self, document_id: str, include_resolved: bool = True
    ) -> list[RiskFlagRecord]:
        return [
            f for f in self._flags.values()
            if f.document_id == str(document_id) and (include_resolved or not f.is_resolved)
        ]

    async def resolve_risk_flag(self, flag_id: str) -> RiskFlagRecord:
        async with self._lock:
            flag = self._flags.get(str(flag_id))
            if flag is None:
                raise RiskFlagNotFoundError(str(flag_id))
            if not flag.is_resolved:
                flag = flag.model_copy(update={"is_resolved": True})
                self._flags[flag.id] = flag
        logger.info("risk_flag_resolved", flag_id=flag.id, document_id=flag.document_id)
        return flag

    async def get_category(self, document_id: str) -> Optional[CategoryRecord]:
        return self._categories.get(str(document_id))

    async def upsert_category(self, document_id: str, draft: CategoryDraft) -> CategoryRecord:
        async with self._lock:
            self._require_document(document_id)
            existing = self._categories.get(str(document_id))
            now = _now()
            record = CategoryRecord(
                **draft.model_dump(exclude={"confidence_score"}),
                confidence_score=stored_confidence(draft),
                id=existing.id if existing else str(uuid.uuid4()),
                document_id=str(document_id),
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            self._categories[str(document_id)] = record

        logger.info(
            "category_upserted",
            document_id=str(document_id),
            category=record.category.value,
            auto_detected=record.auto_detected,
            replaced=existing is not None,
        )
        return record

    async def health_check(self) -> bool:
        return True
