"""
Pydantic request/response schemas for the /api/v1/categories endpoints.
"""

from typing import Optional

from app.models.enums import DocCategory
from app.schemas.contracts import CamelModel, CategoryDraft, CategoryRecord, SuggestedWorkflow


class CategoryClassifyRequest(CamelModel):
    """Same persist/preview split as RiskAnalyzeRequest."""
    document_id: Optional[str] = None
    content: Optional[str] = None


class CategoryClassifyResponse(CamelModel):
    document_id: Optional[str] = None
    persisted: bool
    draft: Optional[CategoryDraft] = None
    category: Optional[CategoryRecord] = None
    label: str


class CategoryOverrideRequest(CamelModel):
    """A user's manual category choice."""
    category: DocCategory
    subcategory: Optional[str] = None
    suggested_workflow: Optional[SuggestedWorkflow] = None
