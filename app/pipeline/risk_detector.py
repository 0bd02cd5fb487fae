"""
Rule-based risk detection for legal document text.

Each detector is an independent rule in DETECTORS. Detectors run in table
order, never suppress each other, and each contributes zero or more
RiskFlagDraft records. Explanations and suggestions are static per detector.

detect_risks() is a pure function of its input: same text, same drafts.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from app.models.enums import RiskType, Severity
from app.observability.metrics import detector_failures_total
from app.pipeline.text_normalizer import contains_all, is_blank, normalize_text
from app.schemas.contracts import RiskFlagDraft, RiskSummary

logger = structlog.get_logger(__name__)


# ── Rule tables ──────────────────────────────────────────────

REQUIRED_SECTIONS = ["case details", "parties", "evidence", "charges", "date"]

# ASCII digits and word boundaries
DATE_PATTERN = re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b", re.ASCII)
DATE_SPLIT = re.compile(r"[/-]")

# (words that must all appear, severity)
CONTRADICTION_PATTERNS = [
    (("innocent", "guilty"), Severity.CRITICAL),
    (("before", "after"), Severity.MEDIUM),
    (("present", "absent"), Severity.LOW),
]

VAGUE_TERMS = ["approximately", "around", "possibly", "maybe", "unclear"]
VAGUE_TERM_THRESHOLD = 3

EXPLANATIONS = {
    "missing_section": (
        "Legal documents should contain all mandatory sections for "
        "completeness and evidentiary value."
    ),
    "ambiguous_date": (
        "Date formats like DD/MM/YYYY vs MM/DD/YYYY can cause confusion "
        "and legal disputes."
    ),
    "contradiction": (
        "Contradictory statements can undermine the credibility of the document."
    ),
    "vague_language": (
        "Legal documents should be precise and definitive. Vague language "
        "can create interpretation issues."
    ),
}

SUGGESTIONS = {
    "missing_section": [
        "Ensure each section contains relevant and complete information",
        "Cross-reference with standard legal document templates",
    ],
    "ambiguous_date": [
        "Use ISO format (YYYY-MM-DD) for clarity",
        "Spell out month names (e.g., 15 January 2024)",
        "Ensure consistency throughout the document",
    ],
    "contradiction": [
        "Review context of each usage",
        "Ensure timeline consistency",
        "Clarify any apparent contradictions with additional context",
    ],
    "vague_language": [
        "Replace approximate terms with specific values",
        "Use definitive language where possible",
        "Qualify uncertain statements with context",
    ],
}


# ── Detectors ────────────────────────────────────────────────
# Each takes lower-cased text and returns a list of drafts.

def detect_missing_sections(text: str) -> list[RiskFlagDraft]:
    missing = [s for s in REQUIRED_SECTIONS if s not in text]
    if not missing:
        return []
    joined = ", ".join(missing)
    return [RiskFlagDraft(
        risk_type=RiskType.MISSING_SECTION,
        severity=Severity.HIGH,
        description=f"Missing required sections: {joined}",
        affected_text="Document structure",
        explanation=EXPLANATIONS["missing_section"],
        suggestions=[f"Add the following sections: {joined}", *SUGGESTIONS["missing_section"]],
    )]


def is_ambiguous_date(raw: str) -> bool:
    """
    True when neither the first nor the second component can be a month.
    Dates such as 05/06/2024 are NOT flagged.
    """
    parts = DATE_SPLIT.split(raw)
    if len(parts) < 2:
        return False
    return int(parts[0]) > 12 and int(parts[1]) > 12


def detect_ambiguous_dates(text: str) -> list[RiskFlagDraft]:
    ambiguous = [m.group(0) for m in DATE_PATTERN.finditer(text) if is_ambiguous_date(m.group(0))]
    if not ambiguous:
        return []
    return [RiskFlagDraft(
        risk_type=RiskType.AMBIGUITY,
        severity=Severity.MEDIUM,
        description="Ambiguous date formats detected",
        affected_text=", ".join(ambiguous),
        explanation=EXPLANATIONS["ambiguous_date"],
        suggestions=list(SUGGESTIONS["ambiguous_date"]),
    )]


def detect_contradictions(text: str) -> list[RiskFlagDraft]:
    drafts = []
    for words, severity in CONTRADICTION_PATTERNS:
        if not contains_all(text, words):
            continue
        drafts.append(RiskFlagDraft(
            risk_type=RiskType.CONTRADICTION,
            severity=severity,
            description=f"Potential contradiction with terms: {' and '.join(words)}",
            affected_text=f"References to: {', '.join(words)}",
            explanation=EXPLANATIONS["contradiction"],
            suggestions=list(SUGGESTIONS["contradiction"]),
        ))
    return drafts


def detect_vague_language(text: str) -> list[RiskFlagDraft]:
    found = [t for t in VAGUE_TERMS if t in text]
    if len(found) < VAGUE_TERM_THRESHOLD:
        return []
    return [RiskFlagDraft(
        risk_type=RiskType.AMBIGUITY,
        severity=Severity.MEDIUM,
        description="Excessive use of vague or uncertain language",
        affected_text=", ".join(found),
        explanation=EXPLANATIONS["vague_language"],
        suggestions=list(SUGGESTIONS["vague_language"]),
    )]


@dataclass(frozen=True)
class Detector:
    name: str
    run: Callable[[str], list[RiskFlagDraft]]


# Order defines output order.
DETECTORS = [
    Detector("missing_section", detect_missing_sections),
    Detector("ambiguous_date", detect_ambiguous_dates),
    Detector("contradiction", detect_contradictions),
    Detector("vague_language", detect_vague_language),
]


def detect_risks(
    document_text: Optional[str],
    detectors: Optional[list[Detector]] = None,
) -> list[RiskFlagDraft]:
    """
    Run every detector over the document text.

    Returns an empty list for blank text or when nothing fires. A detector
    that raises is logged and skipped; the rest still run.
    """
    if is_blank(document_text):
        return []

    text = normalize_text(document_text)
    drafts: list[RiskFlagDraft] = []

    for detector in detectors if detectors is not None else DETECTORS:
        try:
            drafts.extend(detector.run(text))
        except Exception:
            detector_failures_total.labels(detector=detector.name).inc()
            logger.exception("detector_failed", detector=detector.name)

    return drafts


def summarize_risks(flags) -> RiskSummary:
    """Active/resolved counts and the worst unresolved severity."""
    unresolved = [f for f in flags if not f.is_resolved]
    by_severity = {s.value: 0 for s in Severity}
    for f in unresolved:
        by_severity[Severity(f.severity).value] += 1

    highest = None
    if unresolved:
        highest = max((Severity(f.severity) for f in unresolved), key=lambda s: s.rank)

    return RiskSummary(
        total=len(flags),
        unresolved=len(unresolved),
        resolved=len(flags) - len(unresolved),
        by_severity=by_severity,
        highest_severity=highest,
    )
