"""
Document categorisation - first-match-wins keyword rules.

CATEGORY_RULES is evaluated in order; the first rule whose predicate holds
decides the category. Rule order is part of the contract because rules
overlap textually (an FIR mentioning an "order" is still an FIR).
Nothing matching falls back to OTHER at 0.5 confidence.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from app.models.enums import DocCategory, WorkflowPriority
from app.pipeline.text_normalizer import contains_any, normalize_text
from app.schemas.contracts import CategoryDraft, SuggestedWorkflow


ESTIMATED_TIME = "15-30 minutes"
FALLBACK_CONFIDENCE = 0.5
HIGH_PRIORITY_ABOVE = 0.8
MANUAL_CONFIDENCE = 1.0

WORKFLOW_STEPS = {
    DocCategory.CONTRACT: ["Review terms", "Verify parties", "Check clauses", "Identify obligations"],
    DocCategory.FIR: ["Extract incident details", "Identify parties", "List charges", "Timeline analysis"],
    DocCategory.CHARGE_SHEET: ["List charges", "Verify evidence", "Check legal sections", "Review prosecution case"],
    DocCategory.CASE_RECORD: ["Extract case details", "Timeline of events", "List all parties", "Review proceedings"],
    DocCategory.WITNESS_STATEMENT: ["Identify witness", "Extract testimony", "Verify dates", "Cross-reference with case"],
    DocCategory.AUDIO_TRANSCRIPT: ["Review transcription", "Identify speakers", "Extract key points", "Timestamp analysis"],
    DocCategory.OTHER: ["Manual review", "Content analysis", "Classification needed"],
}

# Earliest entry wins when a contract matches several.
CONTRACT_SUBCATEGORIES = [
    (("employment",), "Employment"),
    (("lease", "rent"), "Lease"),
    (("sale", "purchase"), "Sale/Purchase"),
]


def _contract_subcategory(text: str) -> Optional[str]:
    for keywords, label in CONTRACT_SUBCATEGORIES:
        if contains_any(text, keywords):
            return label
    return None


@dataclass(frozen=True)
class CategoryRule:
    category: DocCategory
    confidence: float
    matches: Callable[[str], bool]
    subcategory: Callable[[str], Optional[str]] = lambda text: None


CATEGORY_RULES = [
    CategoryRule(
        DocCategory.FIR, 0.92,
        lambda t: contains_any(t, ("first information report", "fir no", "police station")),
        lambda t: "Criminal",
    ),
    CategoryRule(
        DocCategory.CHARGE_SHEET, 0.88,
        lambda t: contains_any(t, ("charge sheet", "chargesheet", "section 173")),
    ),
    CategoryRule(
        DocCategory.WITNESS_STATEMENT, 0.85,
        lambda t: "witness" in t and contains_any(t, ("statement", "testimony")),
    ),
    CategoryRule(
        DocCategory.CONTRACT, 0.90,
        lambda t: contains_any(t, ("contract", "agreement", "parties hereby agree")),
        _contract_subcategory,
    ),
    CategoryRule(
        DocCategory.CASE_RECORD, 0.80,
        lambda t: contains_any(t, ("case no", "judgment", "order")),
    ),
    CategoryRule(
        DocCategory.AUDIO_TRANSCRIPT, 0.95,
        lambda t: contains_any(t, ("[audio transcription]", "transcript of")),
    ),
]


def build_workflow(category: DocCategory, confidence: float) -> SuggestedWorkflow:
    """Static review steps for the category, prioritised by confidence."""
    return SuggestedWorkflow(
        steps=list(WORKFLOW_STEPS[category]),
        estimated_time=ESTIMATED_TIME,
        priority=WorkflowPriority.HIGH if confidence > HIGH_PRIORITY_ABOVE else WorkflowPriority.MEDIUM,
    )


def classify(document_text: Optional[str]) -> CategoryDraft:
    """
    Classify document text into exactly one category.
    Never returns None; unmatched (including empty) text is OTHER.
    """
    text = normalize_text(document_text)

    for rule in CATEGORY_RULES:
        if rule.matches(text):
            return CategoryDraft(
                category=rule.category,
                subcategory=rule.subcategory(text),
                confidence_score=rule.confidence,
                suggested_workflow=build_workflow(rule.category, rule.confidence),
                auto_detected=True,
            )

    return CategoryDraft(
        category=DocCategory.OTHER,
        subcategory=None,
        confidence_score=FALLBACK_CONFIDENCE,
        suggested_workflow=build_workflow(DocCategory.OTHER, FALLBACK_CONFIDENCE),
        auto_detected=True,
    )


def apply_manual_override(
    current: Optional[CategoryDraft],
    category: DocCategory,
    subcategory: Optional[str] = None,
    suggested_workflow: Optional[SuggestedWorkflow] = None,
) -> CategoryDraft:
    """
    A user-chosen category. Confidence is forced to 1.0 and auto_detected
    to False; subcategory and workflow are kept unless new values are given.
    """
    return CategoryDraft(
        category=category,
        subcategory=subcategory if subcategory is not None else (current.subcategory if current else None),
        confidence_score=MANUAL_CONFIDENCE,
        suggested_workflow=(
            suggested_workflow if suggested_workflow is not None
            else (current.suggested_workflow if current else None)
        ),
        auto_detected=False,
    )
