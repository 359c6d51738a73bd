"""
SnippetHub Backend — Diff Generator Tests
===========================================

What we test:
    ✅ unified_text_diff: equal inputs → "", headers and hunks otherwise
    ✅ DiffService.diff: snapshot is the old side, live snippet the new side
    ✅ Rollback followed by diff against the same version is empty
    ✅ Unknown version raises NotFoundError
    ✅ Titles containing newlines keep the header lines single-line
"""

import pytest

from app.exceptions import NotFoundError
from app.services.diff_service import DiffService, unified_text_diff
from app.services.version_service import version_service


class TestUnifiedTextDiff:

    def test_equal_text_is_empty(self):
        assert unified_text_diff("a\nb\n", "a\nb\n") == ""

    def test_changed_line(self):
        diff = unified_text_diff("x=1", "x=2", old_label="A (v1)", new_label="A (current)")

        lines = diff.splitlines()
        assert lines[0] == "--- A (v1)"
        assert lines[1] == "+++ A (current)"
        assert lines[2].startswith("@@")
        assert "-x=1" in lines
        assert "+x=2" in lines

    def test_context_is_three_lines(self):
        old = "\n".join(f"line{i}" for i in range(20))
        new = old.replace("line10", "changed")

        diff = unified_text_diff(old, new)

        body = [l for l in diff.splitlines()[3:] if l.startswith(" ")]
        assert body == [" line7", " line8", " line9", " line11", " line12", " line13"]


class TestDiffService:

    def setup_method(self):
        self.service = DiffService()

    @pytest.mark.asyncio
    async def test_diff_against_snapshot(self, db_session, make_snippet):
        snippet = await make_snippet("A", "x=1")
        await version_service.apply_update(
            db_session, snippet.id, title="A", content="x=2", language="python", source=None
        )

        result = await self.service.diff(db_session, snippet.id, 1)

        assert result.version.content == "x=1"
        assert result.version.version == 1
        assert result.current.content == "x=2"
        assert result.current.version == 2
        assert "-x=1" in result.diff
        assert "+x=2" in result.diff
        assert "A (v1)" in result.diff
        assert "A (current)" in result.diff

    @pytest.mark.asyncio
    async def test_rollback_then_diff_is_empty(self, db_session, make_snippet):
        snippet = await make_snippet("A", "x=1")
        await version_service.apply_update(
            db_session, snippet.id, title="A", content="x=2", language="python", source=None
        )

        await version_service.rollback(db_session, snippet.id, 1)
        result = await self.service.diff(db_session, snippet.id, 1)

        assert result.diff == ""
        assert len(await version_service.list_versions(db_session, snippet.id)) == 2

    @pytest.mark.asyncio
    async def test_unknown_version_raises(self, db_session, make_snippet):
        snippet = await make_snippet("A", "x=1")

        with pytest.raises(NotFoundError):
            await self.service.diff(db_session, snippet.id, 3)

    @pytest.mark.asyncio
    async def test_multiline_title_keeps_headers_intact(self, db_session, make_snippet):
        snippet = await make_snippet("A", "x=1")
        await version_service.apply_update(
            db_session, snippet.id, title="Line one\nline two", content="x=2", language="python", source=None
        )

        result = await self.service.diff(db_session, snippet.id, 1)

        lines = result.diff.splitlines()
        assert lines[0] == "--- A (v1)"
        assert lines[1] == "+++ Line one line two (current)"
        assert lines[2].startswith("@@")
