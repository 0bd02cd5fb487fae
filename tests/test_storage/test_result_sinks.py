"""
Contract tests run against every ResultSink implementation.
"""

import uuid

import pytest

from app.models.enums import DocCategory, RiskType, Severity
from app.pipeline.doc_classifier import apply_manual_override, classify
from app.pipeline.risk_detector import detect_risks
from app.storage.base import DocumentNotFoundError, RiskFlagNotFoundError, SinkError


@pytest.mark.asyncio
class TestDocuments:

    async def test_create_and_get(self, sink):
        doc = await sink.create_document("FIR 12", "FIR No. 12")
        loaded = await sink.get_document(doc.id)
        assert loaded.title == "FIR 12"
        assert loaded.content == "FIR No. 12"

    async def test_get_unknown(self, sink):
        with pytest.raises(DocumentNotFoundError):
            await sink.get_document(str(uuid.uuid4()))

    async def test_list_paginates(self, sink):
        for i in range(3):
            await sink.create_document(f"doc {i}", "text")
        page, total = await sink.list_documents(limit=2, offset=0)
        assert total == 3
        assert len(page) == 2


@pytest.mark.asyncio
class TestRiskFlags:

    async def test_create_keeps_order_and_defaults(self, sink, risky_text):
        doc = await sink.create_document("risky", risky_text)
        drafts = detect_risks(risky_text)
        records = await sink.create_risk_flags(doc.id, drafts)

        assert [r.risk_type for r in records] == [d.risk_type for d in drafts]
        assert all(not r.is_resolved for r in records)
        assert len({r.id for r in records}) == len(records)

        listed = await sink.list_risk_flags(doc.id)
        assert [r.id for r in listed] == [r.id for r in records]
        assert listed[0].suggestions == drafts[0].suggestions

    async def test_orphaned_write_rejected(self, sink):
        drafts = detect_risks("innocent guilty")
        with pytest.raises(DocumentNotFoundError):
            await sink.create_risk_flags(str(uuid.uuid4()), drafts)

    async def test_resolve_is_idempotent(self, sink):
        doc = await sink.create_document("d", "innocent guilty")
        records = await sink.create_risk_flags(doc.id, detect_risks(doc.content))
        target = records[-1]
        assert target.risk_type == RiskType.CONTRADICTION
        assert target.severity == Severity.CRITICAL

        first = await sink.resolve_risk_flag(target.id)
        second = await sink.resolve_risk_flag(target.id)
        assert first.is_resolved and second.is_resolved

        unresolved = await sink.list_risk_flags(doc.id, include_resolved=False)
        assert target.id not in [r.id for r in unresolved]
        assert len(unresolved) == len(records) - 1

    async def test_resolve_unknown(self, sink):
        with pytest.raises(RiskFlagNotFoundError):
            await sink.resolve_risk_flag(str(uuid.uuid4()))

    async def test_batches_append(self, sink):
        doc = await sink.create_document("d", "innocent guilty")
        await sink.create_risk_flags(doc.id, detect_risks(doc.content))
        await sink.create_risk_flags(doc.id, detect_risks(doc.content))
        assert len(await sink.list_risk_flags(doc.id)) == 4

    async def test_failed_batch_leaves_stored_flags_unchanged(self, sink):
        doc = await sink.create_document("d", "innocent guilty")
        stored = await sink.create_risk_flags(doc.id, detect_risks(doc.content))

        drafts = detect_risks(doc.content)
        broken = drafts[-1].model_copy(update={"description": None})
        with pytest.raises(SinkError):
            await sink.create_risk_flags(doc.id, [drafts[0], broken])

        listed = await sink.list_risk_flags(doc.id)
        assert [r.id for r in listed] == [r.id for r in stored]


@pytest.mark.asyncio
class TestCategories:

    async def test_none_before_classification(self, sink):
        doc = await sink.create_document("d", "text")
        assert await sink.get_category(doc.id) is None

    async def test_upsert_replaces(self, sink):
        doc = await sink.create_document("d", "FIR No. 1")
        first = await sink.upsert_category(doc.id, classify("FIR No. 1"))
        second = await sink.upsert_category(doc.id, classify("Lease agreement"))

        assert second.id == first.id
        stored = await sink.get_category(doc.id)
        assert stored.category == DocCategory.CONTRACT
        assert stored.subcategory == "Lease"
        assert stored.suggested_workflow.steps[0] == "Review terms"

    async def test_manual_override_reads_back_full_confidence(self, sink):
        doc = await sink.create_document("d", "Case No. 5")
        current = await sink.upsert_category(doc.id, classify(doc.content))
        assert current.auto_detected
        assert current.confidence_score == 0.80

        await sink.upsert_category(doc.id, apply_manual_override(current, DocCategory.FIR))
        stored = await sink.get_category(doc.id)
        assert stored.category == DocCategory.FIR
        assert stored.confidence_score == 1.0
        assert stored.auto_detected is False

    async def test_manual_draft_confidence_forced(self, sink):
        doc = await sink.create_document("d", "text")
        draft = classify("").model_copy(update={"auto_detected": False})
        stored = await sink.upsert_category(doc.id, draft)
        assert stored.confidence_score == 1.0

    async def test_orphaned_upsert_rejected(self, sink):
        with pytest.raises(DocumentNotFoundError):
            await sink.upsert_category(str(uuid.uuid4()), classify(""))


@pytest.mark.asyncio
async def test_health(sink):
    assert await sink.health_check()


@pytest.mark.asyncio
class TestSqlSink:
    """Behaviour specific to the SQLAlchemy sink."""

    async def test_database_errors_become_sink_errors(self, tableless_sql_sink):
        missing = str(uuid.uuid4())
        calls = [
            lambda: tableless_sql_sink.get_document(missing),
            lambda: tableless_sql_sink.list_documents(),
            lambda: tableless_sql_sink.list_risk_flags(missing),
            lambda: tableless_sql_sink.resolve_risk_flag(missing),
            lambda: tableless_sql_sink.get_category(missing),
        ]
        for call in calls:
            with pytest.raises(SinkError) as exc:
                await call()
            # Not a not-found error: the API must answer 503
            assert type(exc.value) is SinkError

    async def test_competing_first_write_updates_in_place(self, sql_sink, monkeypatch):
        doc = await sql_sink.create_document("d", "FIR No. 1")
        load_document = sql_sink._load_document
        competing = []

        async def load_then_compete(session, document_id):
            # Another writer stores the first category after this one has
            # looked the document up but before it writes.
            loaded = await load_document(session, document_id)
            if not competing:
                competing.append(None)
                competing[0] = await sql_sink.upsert_category(document_id, classify("FIR No. 1"))
            return loaded

        monkeypatch.setattr(sql_sink, "_load_document", load_then_compete)
        record = await sql_sink.upsert_category(doc.id, classify("Lease agreement"))

        assert competing[0].category == DocCategory.FIR
        assert record.id == competing[0].id
        assert record.category == DocCategory.CONTRACT
        stored = await sql_sink.get_category(doc.id)
        assert stored.id == competing[0].id
        assert stored.subcategory == "Lease"
