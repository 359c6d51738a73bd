"""
SnippetHub Backend — Import/Export Engine Tests
=================================================

What we test:
    ✅ validate(): document-level and per-record problems, version warning
    ✅ fold_records(): ledger tallies with a fake applier, loop never stops
    ✅ export: totals, id filter, tags and favorite flag, Markdown rendering
    ✅ import: new / skipped / overwrite / import-as-new paths, tag and
       favorite handling, preserve_ids, savepoint isolation of a failing
       record, export → import round trip, idempotence
    ✅ transaction failure rolls everything back
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.exceptions import (
    DuplicateSnippetError,
    ImportTransactionError,
    ImportValidationError,
    RecordImportError,
)
from app.models.snippet import Snippet
from app.schemas.transfer import STATUS_ERROR, STATUS_IMPORTED, STATUS_SKIPPED, ImportDetail, ImportOptions
from app.services.favorite_service import favorite_service
from app.services.tag_service import tag_service
from app.services.transfer_service import TransferService, fold_records


async def _count_snippets(db) -> int:
    return (await db.execute(select(func.count(Snippet.id)))).scalar_one()


def _record(title, content="print('hi')", **extra):
    return {"title": title, "content": content, "language": "python", **extra}


class TestValidate:

    def setup_method(self):
        self.service = TransferService()

    def test_valid_document(self):
        report = self.service.validate({"version": "1.1.0", "snippets": [_record("A")]})

        assert report.valid is True
        assert report.errors == []
        assert report.warnings == []
        assert report.stats.total_snippets == 1
        assert report.stats.valid_snippets == 1

    def test_not_an_object(self):
        report = self.service.validate(["not", "a", "dict"])

        assert report.valid is False
        assert report.errors == ["Invalid file format: not a valid JSON object"]

    def test_missing_snippets_array(self):
        report = self.service.validate({"version": "1.1.0"})

        assert report.valid is False
        assert report.errors

    def test_single_missing_title_reports_index_zero(self):
        report = self.service.validate({"snippets": [{"content": "x"}]})

        assert report.valid is False
        assert len(report.errors) == 1
        assert report.errors[0].startswith("snippets[0]:")
        assert "title" in report.errors[0]
        assert report.stats.invalid_snippets == 1

    def test_field_type_errors(self):
        report = self.service.validate(
            {"snippets": [_record("A", language=3, tags="x"), "oops"]}
        )

        assert report.valid is False
        assert "snippets[0]: invalid language field" in report.errors
        assert "snippets[0]: invalid tags field (must be an array)" in report.errors
        assert "snippets[1]: entry must be an object" in report.errors
        assert report.stats.invalid_snippets == 2

    def test_unknown_version_warns(self):
        report = self.service.validate({"version": "9.0.0", "snippets": []})

        assert report.valid is True
        assert report.warnings == ["Export version 9.0.0 may not be fully compatible"]


class TestFoldRecords:

    @pytest.mark.asyncio
    async def test_ledger_tallies(self):
        async def apply(record):
            if record["title"] == "dup":
                raise DuplicateSnippetError(7, "dup")
            if record["title"] == "bad":
                raise RecordImportError("Missing required fields: title or content")
            if record["title"] == "boom":
                raise RuntimeError("driver exploded")
            return ImportDetail(title=record["title"], status=STATUS_IMPORTED, message="ok", snippet_id=1)

        result = await fold_records(
            [{"title": "a"}, {"title": "dup"}, {"title": "bad"}, {"title": "boom"}, {"title": "b"}],
            apply,
        )

        assert (result.success, result.skipped, result.errors) == (2, 1, 2)
        assert [d.status for d in result.details] == [
            STATUS_IMPORTED, STATUS_SKIPPED, STATUS_ERROR, STATUS_ERROR, STATUS_IMPORTED,
        ]
        assert result.details[1].snippet_id == 7
        assert "already exists" in result.details[1].message
        assert result.details[3].message == "driver exploded"

    @pytest.mark.asyncio
    async def test_non_dict_record_has_no_title(self):
        apply = AsyncMock(side_effect=RecordImportError("Invalid snippet entry: expected an object"))

        result = await fold_records(["x"], apply)

        assert result.errors == 1
        assert result.details[0].title is None


class TestExport:

    def setup_method(self):
        self.service = TransferService()

    @pytest.mark.asyncio
    async def test_export_all(self, db_session, make_snippet):
        for title in ("A", "B", "C"):
            await make_snippet(title, f"body {title}")

        document = await self.service.export_document(db_session)

        assert document.total_snippets == 3
        assert document.version == "1.1.0"
        assert document.metadata.format == "json"
        assert {s.title for s in document.snippets} == {"A", "B", "C"}

    @pytest.mark.asyncio
    async def test_export_filter_keeps_full_tag_list(self, db_session, make_snippet):
        await make_snippet("A", "a")
        target = await make_snippet("B", "b", tags=["web", "api", "util"])
        await make_snippet("C", "c", tags=["web"])
        await favorite_service.mark(db_session, target.id)

        document = await self.service.export_document(db_session, [target.id])

        assert document.total_snippets == 1
        exported = document.snippets[0]
        assert exported.id == target.id
        assert exported.is_favorite is True
        assert sorted(t.name for t in exported.tags) == ["api", "util", "web"]

    @pytest.mark.asyncio
    async def test_render_markdown(self, db_session, make_snippet):
        snippet = await make_snippet("Hello", "print('hi')", source="docs", tags=["py"])
        await favorite_service.mark(db_session, snippet.id)

        markdown = self.service.render_markdown(await self.service.export_document(db_session))

        assert markdown.startswith("# SnippetHub Export\n")
        assert "**Total Snippets:** 1" in markdown
        assert "## Hello" in markdown
        assert "**Language:** python" in markdown
        assert "**Source:** docs" in markdown
        assert "**Favorite:** ⭐" in markdown
        assert "**Tags:** `py`" in markdown
        assert "```python\nprint('hi')\n```" in markdown


class TestImport:

    def setup_method(self):
        self.service = TransferService()

    @pytest.mark.asyncio
    async def test_import_new_records_with_tags_and_favorite(self, db_session):
        document = {
            "snippets": [
                _record("A", tags=["py", {"name": "cli", "color": "#FF0000"}], is_favorite=True),
                {"title": "B", "content": "b"},
            ]
        }

        result = await self.service.import_document(db_session, document)

        assert (result.success, result.skipped, result.errors) == (2, 0, 0)
        a_id, b_id = (d.snippet_id for d in result.details)
        b = await db_session.get(Snippet, b_id)
        assert b.language == "plaintext"
        tags = (await tag_service.tags_for(db_session, [a_id]))[a_id]
        assert {(t.name, t.color) for t in tags} == {("py", "#6B7280"), ("cli", "#FF0000")}
        assert await favorite_service.is_favorite(db_session, a_id) is True
        assert await favorite_service.is_favorite(db_session, b_id) is False

    @pytest.mark.asyncio
    async def test_second_import_skips_everything(self, db_session):
        document = {"snippets": [_record("A"), _record("B", content="other")]}

        await self.service.import_document(db_session, document)
        again = await self.service.import_document(db_session, document)

        assert (again.success, again.skipped, again.errors) == (0, 2, 0)
        assert all("already exists" in d.message for d in again.details)
        assert await _count_snippets(db_session) == 2

    @pytest.mark.asyncio
    async def test_duplicate_imported_as_new_when_not_skipping(self, db_session, make_snippet):
        await make_snippet("A", "print('hi')")

        result = await self.service.import_document(
            db_session,
            {"snippets": [_record("A")]},
            ImportOptions(skip_duplicates=False),
        )

        assert result.success == 1
        assert await _count_snippets(db_session) == 2

    @pytest.mark.asyncio
    async def test_overwrite_updates_in_place(self, db_session, make_snippet):
        existing = await make_snippet("A", "print('hi')", language="python", tags=["old"])

        result = await self.service.import_document(
            db_session,
            {"snippets": [_record("A", language="python3", source="gist", tags=["new"], is_favorite=True)]},
            ImportOptions(overwrite_existing=True),
        )

        assert result.success == 1
        assert result.details[0].snippet_id == existing.id
        snippet = await db_session.get(Snippet, existing.id)
        assert snippet.language == "python3"
        assert snippet.source == "gist"
        # Title and content are the duplicate key, so no snapshot is taken.
        assert snippet.version == 1
        tags = (await tag_service.tags_for(db_session, [existing.id]))[existing.id]
        assert [t.name for t in tags] == ["new"]
        assert await favorite_service.is_favorite(db_session, existing.id) is True

    @pytest.mark.asyncio
    async def test_invalid_record_lands_in_ledger(self, db_session):
        result = await self.service.import_document(
            db_session, {"snippets": [{"title": "no content"}, _record("ok")]}
        )

        assert (result.success, result.errors) == (1, 1)
        assert result.details[0].status == STATUS_ERROR
        assert result.details[0].title == "no content"

    @pytest.mark.asyncio
    async def test_failing_record_leaves_no_partial_writes(self, db_session):
        original = favorite_service.set_favorite

        async def flaky(db, snippet_id, value):
            snippet = await db.get(Snippet, snippet_id)
            if snippet.title == "Bad":
                raise RuntimeError("favorite store unavailable")
            await original(db, snippet_id, value)

        with patch.object(favorite_service, "set_favorite", side_effect=flaky):
            result = await self.service.import_document(
                db_session,
                {"snippets": [_record("Good"), _record("Bad", tags=["t"]), _record("Also good")]},
            )

        assert (result.success, result.errors) == (2, 1)
        titles = set((await db_session.execute(select(Snippet.title))).scalars().all())
        assert titles == {"Good", "Also good"}

    @pytest.mark.asyncio
    async def test_preserve_ids(self, db_session, make_snippet):
        taken = await make_snippet("X", "x")

        result = await self.service.import_document(
            db_session,
            {"snippets": [_record("Free", id=500), _record("Clash", id=taken.id)]},
            ImportOptions(preserve_ids=True),
        )

        assert result.details[0].snippet_id == 500
        assert result.details[1].snippet_id != taken.id
        assert "new id assigned" in result.details[1].message

    @pytest.mark.asyncio
    async def test_missing_snippets_raises_before_writes(self, db_session):
        with pytest.raises(ImportValidationError):
            await self.service.import_document(db_session, {"version": "1.1.0"})

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, db_session):
        failing_commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error")))

        with patch.object(db_session, "commit", failing_commit):
            with pytest.raises(ImportTransactionError):
                await self.service.import_document(db_session, {"snippets": [_record("A")]})

        assert await _count_snippets(db_session) == 0

    @pytest.mark.asyncio
    async def test_export_import_round_trip(self, db_session, make_snippet):
        a = await make_snippet("A", "a = 1", language="python", tags=["x", "y"])
        await make_snippet("B", "let b = 2;", language="javascript")
        await favorite_service.mark(db_session, a.id)
        await db_session.commit()

        before = await self.service.export_document(db_session)
        result = await self.service.import_document(
            db_session,
            before.model_dump(mode="json"),
            ImportOptions(overwrite_existing=True, skip_duplicates=False),
        )
        after = await self.service.export_document(db_session)

        assert result.success == 2
        assert after.total_snippets == before.total_snippets

        def fingerprint(doc):
            return {
                (s.title, s.content, s.language, frozenset(t.name for t in s.tags), s.is_favorite)
                for s in doc.snippets
            }

        assert fingerprint(after) == fingerprint(before)
