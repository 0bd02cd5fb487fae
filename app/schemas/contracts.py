"""
Core analysis contracts.
Drafts are what the rule engines emit; records are what the result sink
stores and returns. All downstream code (sink, API) operates on these and
never on engine internals.

JSON field names are camelCase on the wire; models accept either form.
"""

import json
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from app.models.enums import DocCategory, RiskType, Severity, WorkflowPriority


class CamelModel(BaseModel):
    """Base model serialising to camelCase and accepting snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Risk flags ───────────────────────────────────────────────

class RiskFlagDraft(CamelModel):
    """One finding from the risk rule engine, before the sink assigns an id."""
    risk_type: RiskType
    severity: Severity
    description: str
    affected_text: str
    explanation: str
    suggestions: list[str] = []

    @computed_field(alias="riskTypeLabel")
    @property
    def risk_type_label(self) -> str:
        return self.risk_type.label

    @computed_field(alias="severityLabel")
    @property
    def severity_label(self) -> str:
        return self.severity.label


def parse_suggestions(value) -> list[str]:
    """
    Normalise stored suggestions.
    Accepts a list, a JSON-encoded list, or a bare string.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(s) for s in value]
    if isinstance(value, str):
        if not value:
            return []
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return [value]
        return [str(s) for s in parsed] if isinstance(parsed, list) else [value]
    return [str(value)]


class RiskFlagRecord(RiskFlagDraft):
    """A stored risk flag."""
    id: str
    document_id: str
    is_resolved: bool = False
    created_at: Optional[datetime] = None

    @field_validator("suggestions", mode="before")
    @classmethod
    def _coerce_suggestions(cls, v):
        return parse_suggestions(v)


class RiskSummary(CamelModel):
    """Counts for the active/resolved split shown alongside a document."""
    total: int = 0
    unresolved: int = 0
    resolved: int = 0
    by_severity: dict[str, int] = {}
    highest_severity: Optional[Severity] = None


# ── Categories ───────────────────────────────────────────────

class SuggestedWorkflow(CamelModel):
    steps: list[str]
    estimated_time: str
    priority: WorkflowPriority


class CategoryDraft(CamelModel):
    """Output of the category rule engine (or of a manual override)."""
    category: DocCategory
    subcategory: Optional[str] = None
    confidence_score: float = Field(ge=0.0, le=1.0)
    suggested_workflow: Optional[SuggestedWorkflow] = None
    auto_detected: bool = True


class CategoryRecord(CategoryDraft):
    """The single stored category for a document."""
    id: str
    document_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ── Documents ────────────────────────────────────────────────

class DocumentRecord(CamelModel):
    id: str
    title: str
    content: str
    created_at: Optional[datetime] = None
