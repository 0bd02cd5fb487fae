"""
Prometheus metrics for the document insights service.
"""

from prometheus_client import Counter, Histogram


# ── Risk Detection ───────────────────────────────────────────
risk_flags_detected_total = Counter(
    "risk_flags_detected_total",
    "Total risk flags produced by the risk rule engine",
    ["risk_type", "severity"],
)

risk_flags_resolved_total = Counter(
    "risk_flags_resolved_total",
    "Total risk flags marked as resolved",
)

detector_failures_total = Counter(
    "detector_failures_total",
    "Detectors that raised while scanning a document",
    ["detector"],
)

# ── Categorisation ───────────────────────────────────────────
documents_classified_total = Counter(
    "documents_classified_total",
    "Total category records written",
    ["category", "auto_detected"],
)

classification_confidence = Histogram(
    "classification_confidence",
    "Distribution of rule engine confidence scores",
    ["category"],
    buckets=[0.5, 0.6, 0.7, 0.8, 0.85, 0.9, 0.95, 1.0],
)

# ── Analysis ─────────────────────────────────────────────────
analysis_duration_seconds = Histogram(
    "analysis_duration_seconds",
    "Time per analysis stage",
    ["stage"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5],
)
