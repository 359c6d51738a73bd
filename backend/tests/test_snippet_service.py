"""
SnippetHub Backend — Snippet Service Tests
============================================

What we test:
    ✅ Create resolves tags and starts at version 1
    ✅ Update goes through the versioning engine; tags replaced only when given
    ✅ List filters (search, language, tag, favorites) and sort whitelist
    ✅ Delete cascades to versions, tag links and favorite marker
    ✅ Database failures surface as DatabaseError
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.favorite import Favorite
from app.models.snippet import SnippetVersion
from app.models.tag import SnippetTag, Tag
from app.schemas.snippet import SnippetUpdate
from app.services.favorite_service import favorite_service
from app.services.snippet_service import SnippetService


class TestCreateAndUpdate:

    def setup_method(self):
        self.service = SnippetService()

    @pytest.mark.asyncio
    async def test_create_links_tags(self, make_snippet):
        snippet = await make_snippet("Hello", "print(1)", tags=["py", "demo", "py"])

        assert snippet.version == 1
        assert snippet.is_favorite is False
        assert sorted(t.name for t in snippet.tags) == ["demo", "py"]

    @pytest.mark.asyncio
    async def test_update_keeps_tags_when_omitted(self, db_session, make_snippet):
        snippet = await make_snippet("A", "x=1", tags=["keep"])

        updated = await self.service.update_snippet(
            db_session, snippet.id, SnippetUpdate(title="A", content="x=2", language="python")
        )

        assert updated.version == 2
        assert [t.name for t in updated.tags] == ["keep"]

    @pytest.mark.asyncio
    async def test_update_replaces_tags_when_given(self, db_session, make_snippet):
        snippet = await make_snippet("A", "x=1", tags=["old"])

        updated = await self.service.update_snippet(
            db_session,
            snippet.id,
            SnippetUpdate(title="A", content="x=1", language="python", tags=[]),
        )

        assert updated.tags == []
        assert updated.version == 1

    @pytest.mark.asyncio
    async def test_update_missing_snippet(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_snippet(
                db_session, 404, SnippetUpdate(title="A", content="x", language="python")
            )


class TestListSnippets:

    def setup_method(self):
        self.service = SnippetService()

    @pytest.mark.asyncio
    async def test_filters(self, db_session, make_snippet):
        fetch = await make_snippet("Fetch JSON", "await fetch(url)", language="javascript", tags=["web"])
        await make_snippet("Parse args", "argparse.ArgumentParser()", language="python", tags=["cli"])
        sql = await make_snippet("Top rows", "SELECT * FROM t LIMIT 5", language="sql")
        await favorite_service.mark(db_session, sql.id)

        by_search = await self.service.list_snippets(db_session, search="FETCH")
        by_language = await self.service.list_snippets(db_session, language="python")
        by_tag = await self.service.list_snippets(db_session, tag="web")
        favorites = await self.service.list_snippets(db_session, favorites_only=True)

        assert [s.id for s in by_search] == [fetch.id]
        assert [s.title for s in by_language] == ["Parse args"]
        assert [s.id for s in by_tag] == [fetch.id]
        assert [s.id for s in favorites] == [sql.id]
        assert favorites[0].is_favorite is True

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards(self, db_session, make_snippet):
        await make_snippet("Percent", "100% done")
        await make_snippet("Plain", "nothing here")

        result = await self.service.list_snippets(db_session, search="%")

        assert [s.title for s in result] == ["Percent"]

    @pytest.mark.asyncio
    async def test_sort_by_title(self, db_session, make_snippet):
        for title in ("b", "c", "a"):
            await make_snippet(title, title)

        ascending = await self.service.list_snippets(db_session, sort="title", order="asc")

        assert [s.title for s in ascending] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_rejects_unknown_sort(self, db_session):
        with pytest.raises(ValidationError):
            await self.service.list_snippets(db_session, sort="id; DROP TABLE snippets")

        with pytest.raises(ValidationError):
            await self.service.list_snippets(db_session, order="sideways")

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("locked"))

        with pytest.raises(DatabaseError):
            await self.service.list_snippets(mock_db_session)


class TestDelete:

    def setup_method(self):
        self.service = SnippetService()

    @pytest.mark.asyncio
    async def test_delete_cascades(self, db_session, make_snippet):
        snippet = await make_snippet("A", "x=1", tags=["t"])
        await self.service.update_snippet(
            db_session, snippet.id, SnippetUpdate(title="A", content="x=2", language="python")
        )
        await favorite_service.mark(db_session, snippet.id)

        await self.service.delete_snippet(db_session, snippet.id)

        async def count(column):
            return (await db_session.execute(select(func.count(column)))).scalar_one()

        assert await count(SnippetVersion.id) == 0
        assert await count(SnippetTag.id) == 0
        assert await count(Favorite.id) == 0
        # The tag itself survives.
        assert await count(Tag.id) == 1
        with pytest.raises(NotFoundError):
            await self.service.get_snippet(db_session, snippet.id)

    @pytest.mark.asyncio
    async def test_get_missing_snippet(self, mock_db_session):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = result

        with pytest.raises(NotFoundError):
            await self.service.get_snippet(mock_db_session, 1)
