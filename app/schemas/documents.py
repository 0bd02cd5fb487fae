"""
Pydantic request/response schemas for the /api/v1/documents endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.contracts import CamelModel, CategoryRecord, RiskFlagRecord


# ── Request Schemas ──────────────────────────────────────────

class DocumentCreateRequest(CamelModel):
    """Extracted document text to store for analysis."""
    title: str = Field(min_length=1, max_length=500)
    content: str
    analyze: bool = False


# ── Response Schemas ─────────────────────────────────────────

class DocumentSummary(CamelModel):
    """Lightweight document summary for list endpoints."""
    id: str
    title: str
    content_length: int
    created_at: Optional[datetime] = None


class DocumentListResponse(CamelModel):
    """Paginated document list response."""
    documents: list[DocumentSummary]
    total: int
    limit: int
    offset: int


class DocumentDetail(CamelModel):
    """Full document with its stored analysis."""
    id: str
    title: str
    content: str
    created_at: Optional[datetime] = None
    risk_flags: list[RiskFlagRecord] = []
    category: Optional[CategoryRecord] = None
