"""
Closed enumerations shared by the rule engines, the ORM and the API.
Values are the wire/storage strings and MUST NOT change.
"""

from enum import Enum


class RiskType(str, Enum):
    INCONSISTENCY = "inconsistency"
    MISSING_SECTION = "missing_section"
    AMBIGUITY = "ambiguity"
    MISINFORMATION = "misinformation"
    CONTRADICTION = "contradiction"

    @property
    def label(self) -> str:
        return RISK_TYPE_LABELS[self]


class Severity(str, Enum):
    """Ordered low < medium < high < critical."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


class DocCategory(str, Enum):
    CONTRACT = "contract"
    FIR = "fir"
    CHARGE_SHEET = "charge_sheet"
    CASE_RECORD = "case_record"
    WITNESS_STATEMENT = "witness_statement"
    AUDIO_TRANSCRIPT = "audio_transcript"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


class WorkflowPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}

RISK_TYPE_LABELS = {
    RiskType.INCONSISTENCY: "Inconsistency",
    RiskType.MISSING_SECTION: "Missing Section",
    RiskType.AMBIGUITY: "Ambiguity",
    RiskType.MISINFORMATION: "Potential Misinformation",
    RiskType.CONTRADICTION: "Contradiction",
}

CATEGORY_LABELS = {
    DocCategory.CONTRACT: "Contract",
    DocCategory.FIR: "FIR (First Information Report)",
    DocCategory.CHARGE_SHEET: "Charge Sheet",
    DocCategory.CASE_RECORD: "Case Record",
    DocCategory.WITNESS_STATEMENT: "Witness Statement",
    DocCategory.AUDIO_TRANSCRIPT: "Audio Transcript",
    DocCategory.OTHER: "Other Document",
}
