"""
Tests for the analyzer that connects the engines to a sink.
"""

import uuid

import pytest

from app.models.enums import DocCategory, RiskType
from app.pipeline.orchestrator import DocumentAnalyzer
from app.storage.base import CategoryNotFoundError, DocumentNotFoundError


@pytest.mark.asyncio
class TestDocumentAnalyzer:

    async def test_analyze_stores_flags_and_category(self, memory_sink, risky_text):
        doc = await memory_sink.create_document("risky", risky_text)
        result = await DocumentAnalyzer(memory_sink).analyze(doc.id)

        assert len(result.risk_flags) == 5
        assert result.risk_flags[0].risk_type == RiskType.MISSING_SECTION
        assert result.category.category == DocCategory.OTHER
        assert await memory_sink.list_risk_flags(doc.id) == result.risk_flags
        assert await memory_sink.get_category(doc.id) == result.category

    async def test_clean_document_stores_nothing(self, memory_sink, fir_text):
        doc = await memory_sink.create_document("fir", fir_text)
        analyzer = DocumentAnalyzer(memory_sink)

        assert await analyzer.analyze_risks(doc.id) == []
        assert await memory_sink.list_risk_flags(doc.id) == []

        category = await analyzer.categorize(doc.id)
        assert category.category == DocCategory.FIR
        assert category.subcategory == "Criminal"

    async def test_reanalysis_replaces_category(self, memory_sink):
        doc = await memory_sink.create_document("d", "Employment agreement")
        analyzer = DocumentAnalyzer(memory_sink)
        await analyzer.categorize(doc.id)
        updated = await analyzer.categorize(doc.id, content="Charge sheet")
        assert updated.category == DocCategory.CHARGE_SHEET
        assert (await memory_sink.get_category(doc.id)).category == DocCategory.CHARGE_SHEET

    async def test_override(self, memory_sink):
        doc = await memory_sink.create_document("d", "Employment agreement")
        analyzer = DocumentAnalyzer(memory_sink)
        await analyzer.categorize(doc.id)

        record = await analyzer.override_category(doc.id, DocCategory.CASE_RECORD)
        assert record.category == DocCategory.CASE_RECORD
        assert record.confidence_score == 1.0
        assert record.auto_detected is False
        assert record.subcategory == "Employment"

    async def test_override_without_category(self, memory_sink):
        doc = await memory_sink.create_document("d", "text")
        with pytest.raises(CategoryNotFoundError):
            await DocumentAnalyzer(memory_sink).override_category(doc.id, DocCategory.FIR)

    async def test_unknown_document(self, memory_sink):
        with pytest.raises(DocumentNotFoundError):
            await DocumentAnalyzer(memory_sink).analyze(str(uuid.uuid4()))

    async def test_summary_after_resolve(self, memory_sink, risky_text):
        doc = await memory_sink.create_document("risky", risky_text)
        analyzer = DocumentAnalyzer(memory_sink)
        flags = await analyzer.analyze_risks(doc.id)
        await analyzer.resolve_risk(flags[2].id)

        summary = await analyzer.summarize(doc.id)
        assert summary.total == 5
        assert summary.resolved == 1
        assert summary.by_severity["critical"] == 0
        assert summary.highest_severity.value == "high"
