"""
Tests for the first-match-wins document classifier.
"""

import pytest

from app.models.enums import DocCategory, WorkflowPriority
from app.pipeline.doc_classifier import (
    WORKFLOW_STEPS,
    apply_manual_override,
    build_workflow,
    classify,
)
from app.schemas.contracts import SuggestedWorkflow


class TestClassify:
    """Category rules and their precedence."""

    def test_empty_is_other(self):
        result = classify("")
        assert result.category == DocCategory.OTHER
        assert result.confidence_score == 0.5
        assert result.subcategory is None
        assert result.auto_detected

    def test_fir(self):
        result = classify("FIR No. 123 filed at Police Station X")
        assert result.category == DocCategory.FIR
        assert result.subcategory == "Criminal"
        assert result.confidence_score == 0.92

    def test_employment_contract(self):
        result = classify("This Employment Agreement is made between...")
        assert result.category == DocCategory.CONTRACT
        assert result.subcategory == "Employment"
        assert result.confidence_score == 0.90

    @pytest.mark.parametrize("text,expected", [
        ("Charge Sheet under Section 173 CrPC", DocCategory.CHARGE_SHEET),
        ("chargesheet filed", DocCategory.CHARGE_SHEET),
        ("Witness statement of Mr. Rao", DocCategory.WITNESS_STATEMENT),
        ("The witness gave testimony", DocCategory.WITNESS_STATEMENT),
        ("Case No. 44 of 2023, judgment reserved", DocCategory.CASE_RECORD),
        ("[Audio Transcription] speaker one", DocCategory.AUDIO_TRANSCRIPT),
        ("Transcript of the hearing", DocCategory.AUDIO_TRANSCRIPT),
        ("Grocery list: milk, eggs", DocCategory.OTHER),
    ])
    def test_rule_table(self, text, expected):
        assert classify(text).category == expected

    def test_witness_without_statement_falls_through(self):
        assert classify("A witness was nearby").category == DocCategory.OTHER

    def test_fir_beats_later_rules(self):
        # Mentions a contract and an order, but the FIR rule comes first
        result = classify("Police Station complaint about a breached contract; order pending")
        assert result.category == DocCategory.FIR

    def test_order_inside_transcript_is_case_record(self):
        # "order" (case_record) is checked before the transcript markers
        result = classify("Transcript of proceedings in order of appearance")
        assert result.category == DocCategory.CASE_RECORD

    @pytest.mark.parametrize("text,subcategory", [
        ("Lease agreement for flat 4B", "Lease"),
        ("Monthly rent agreement", "Lease"),
        ("Contract for sale of goods", "Sale/Purchase"),
        ("Purchase agreement", "Sale/Purchase"),
        ("Service agreement", None),
        ("Employment contract including lease of a company car", "Employment"),
    ])
    def test_contract_subcategory_priority(self, text, subcategory):
        result = classify(text)
        assert result.category == DocCategory.CONTRACT
        assert result.subcategory == subcategory

    def test_workflow_attached(self):
        result = classify("FIR No. 1")
        wf = result.suggested_workflow
        assert wf.steps == ["Extract incident details", "Identify parties", "List charges", "Timeline analysis"]
        assert wf.estimated_time == "15-30 minutes"
        assert wf.priority == WorkflowPriority.HIGH

    def test_idempotent(self):
        text = "This Employment Agreement is made between..."
        assert classify(text) == classify(text)


class TestBuildWorkflow:

    def test_priority_threshold_is_strict(self):
        assert build_workflow(DocCategory.CASE_RECORD, 0.80).priority == WorkflowPriority.MEDIUM
        assert build_workflow(DocCategory.CASE_RECORD, 0.81).priority == WorkflowPriority.HIGH

    def test_every_category_has_steps(self):
        for category in DocCategory:
            assert 3 <= len(WORKFLOW_STEPS[category]) <= 4

    def test_other_steps(self):
        assert build_workflow(DocCategory.OTHER, 0.5).steps == [
            "Manual review", "Content analysis", "Classification needed",
        ]


class TestManualOverride:

    def test_forces_confidence_and_flag(self):
        current = classify("FIR No. 9")
        result = apply_manual_override(current, DocCategory.CHARGE_SHEET)
        assert result.category == DocCategory.CHARGE_SHEET
        assert result.confidence_score == 1.0
        assert result.auto_detected is False

    def test_keeps_subcategory_and_workflow(self):
        current = classify("FIR No. 9")
        result = apply_manual_override(current, DocCategory.CASE_RECORD)
        assert result.subcategory == "Criminal"
        assert result.suggested_workflow == current.suggested_workflow

    def test_replaces_when_given(self):
        current = classify("FIR No. 9")
        workflow = SuggestedWorkflow(steps=["Read"], estimated_time="5 minutes", priority=WorkflowPriority.MEDIUM)
        result = apply_manual_override(current, DocCategory.OTHER, subcategory="Civil", suggested_workflow=workflow)
        assert result.subcategory == "Civil"
        assert result.suggested_workflow.steps == ["Read"]

    def test_without_current_record(self):
        result = apply_manual_override(None, DocCategory.CONTRACT)
        assert result.subcategory is None
        assert result.suggested_workflow is None
        assert result.confidence_score == 1.0


def test_category_labels():
    assert DocCategory.FIR.label == "FIR (First Information Report)"
    assert DocCategory.OTHER.label == "Other Document"
