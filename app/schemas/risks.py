"""
Pydantic request/response schemas for the /api/v1/risks endpoints.
"""

from typing import Optional

from app.schemas.contracts import CamelModel, RiskFlagDraft, RiskFlagRecord


class RiskAnalyzeRequest(CamelModel):
    """
    Run the risk engine. With document_id the flags are stored against that
    document (content defaults to the stored text); without it the drafts
    are returned and nothing is stored.
    """
    document_id: Optional[str] = None
    content: Optional[str] = None


class RiskAnalyzeResponse(CamelModel):
    document_id: Optional[str] = None
    persisted: bool
    risk_count: int
    drafts: list[RiskFlagDraft] = []
    risk_flags: list[RiskFlagRecord] = []
    message: str
