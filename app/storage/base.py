"""
Abstract result sink.
The rule engines never touch storage; the analyzer and the API hand drafts
to a ResultSink and read records back from it.

Every sink must:
1. Reject writes that reference an unknown document (DocumentNotFoundError)
2. Store a batch of risk flags all-or-nothing
3. Treat upsert_category as an atomic replace of the single per-document record
4. Store manual categories (auto_detected=False) at confidence 1.0
5. Never un-resolve a flag
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.schemas.contracts import (
    CategoryDraft,
    CategoryRecord,
    DocumentRecord,
    RiskFlagDraft,
    RiskFlagRecord,
)


class SinkError(Exception):
    """Raised when the result sink cannot complete an operation."""

    error_code = "ERR_SINK"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DocumentNotFoundError(SinkError):
    error_code = "ERR_DOCUMENT_NOT_FOUND"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class RiskFlagNotFoundError(SinkError):
    error_code = "ERR_RISK_FLAG_NOT_FOUND"

    def __init__(self, flag_id: str):
        self.flag_id = flag_id
        super().__init__(f"Risk flag not found: {flag_id}")


class CategoryNotFoundError(SinkError):
    error_code = "ERR_CATEGORY_NOT_FOUND"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"No category stored for document: {document_id}")


def stored_confidence(draft: CategoryDraft) -> float:
    """Manual categories are always stored at full confidence."""
    return draft.confidence_score if draft.auto_detected else 1.0


class ResultSink(ABC):
    """Storage for documents, risk flags and categories."""

    @property
    @abstractmethod
    def sink_name(self) -> str:
        """Identifier used in logs and health output: 'sql', 'memory'."""
        ...

    # ── Documents ────────────────────────────────────────────

    @abstractmethod
    async def create_document(self, title: str, content: str) -> DocumentRecord:
        ...

    @abstractmethod
    async def get_document(self, document_id: str) -> DocumentRecord:
        """Raises DocumentNotFoundError when absent."""
        ...

    @abstractmethod
    async def list_documents(self, limit: int = 50, offset: int = 0) -> tuple[list[DocumentRecord], int]:
        """Newest first. Returns (page, total)."""
        ...

    # ── Risk flags ───────────────────────────────────────────

    @abstractmethod
    async def create_risk_flags(
        self, document_id: str, drafts: list[RiskFlagDraft]
    ) -> list[RiskFlagRecord]:
        """Store drafts as unresolved flags, in order. All or nothing."""
        ...

    @abstractmethod
    async def list_risk_flags(
        self, document_id: str, include_resolved: bool = True
    ) -> list[RiskFlagRecord]:
        """Flags in creation order."""
        ...

    @abstractmethod
    async def resolve_risk_flag(self, flag_id: str) -> RiskFlagRecord:
        """Mark a flag resolved. Idempotent."""
        ...

    # ── Categories ───────────────────────────────────────────

    @abstractmethod
    async def get_category(self, document_id: str) -> Optional[CategoryRecord]:
        ...

    @abstractmethod
    async def upsert_category(self, document_id: str, draft: CategoryDraft) -> CategoryRecord:
        """Replace the document's category record (last write wins)."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the backing store is reachable."""
        ...
