"""
SnippetHub Backend — Tag & Favorite Service Tests
===================================================

What we test:
    ✅ Tag list ordering by usage, create/update conflicts
    ✅ Deleting a linked tag fails with a conflict carrying the usage count
    ✅ resolve() keeps an existing tag's color
    ✅ Suggestions from language keywords, concept patterns, popular tags
    ✅ Favorites: add (409 twice), remove (404 when absent), toggle, list order
"""

import pytest

from app.exceptions import ConflictError, NotFoundError
from app.services.favorite_service import FavoriteService
from app.services.snippet_service import snippet_service
from app.services.tag_service import MAX_SUGGESTIONS, TagService


class TestTagCrud:

    def setup_method(self):
        self.service = TagService()

    @pytest.mark.asyncio
    async def test_list_orders_by_usage(self, db_session, make_snippet):
        await self.service.create_tag(db_session, "unused")
        await make_snippet("A", "a", tags=["popular", "rare"])
        await make_snippet("B", "b", tags=["popular"])

        tags = await self.service.list_tags(db_session)

        assert [(t.name, t.usage_count) for t in tags] == [
            ("popular", 2), ("rare", 1), ("unused", 0),
        ]

    @pytest.mark.asyncio
    async def test_create_duplicate_conflicts(self, db_session):
        created = await self.service.create_tag(db_session, "py", "#3776AB")

        assert created.color == "#3776AB"
        with pytest.raises(ConflictError):
            await self.service.create_tag(db_session, "py")

    @pytest.mark.asyncio
    async def test_update_name_clash_conflicts(self, db_session):
        await self.service.create_tag(db_session, "a")
        b = await self.service.create_tag(db_session, "b")

        with pytest.raises(ConflictError):
            await self.service.update_tag(db_session, b.id, "a")

        renamed = await self.service.update_tag(db_session, b.id, "c")
        assert renamed.name == "c"
        assert renamed.color == b.color

    @pytest.mark.asyncio
    async def test_delete_tag_in_use_conflicts(self, db_session, make_snippet):
        await make_snippet("A", "a", tags=["busy"])
        await make_snippet("B", "b", tags=["busy"])
        busy = next(t for t in await self.service.list_tags(db_session) if t.name == "busy")

        with pytest.raises(ConflictError) as exc_info:
            await self.service.delete_tag(db_session, busy.id)

        assert exc_info.value.context["usage_count"] == 2

    @pytest.mark.asyncio
    async def test_delete_unused_tag(self, db_session):
        tag = await self.service.create_tag(db_session, "temp")

        await self.service.delete_tag(db_session, tag.id)

        with pytest.raises(NotFoundError):
            await self.service.get_tag(db_session, tag.id)

    @pytest.mark.asyncio
    async def test_resolve_keeps_existing_color(self, db_session):
        await self.service.create_tag(db_session, "web", "#00FF00")

        tag = await self.service.resolve(db_session, "web", "#FF0000")

        assert tag.color == "#00FF00"


class TestSuggestions:

    def setup_method(self):
        self.service = TagService()

    @pytest.mark.asyncio
    async def test_language_keywords_and_patterns(self, db_session):
        content = "import pandas as pd\n# fetch rows from the database and cache them"

        suggestions = await self.service.suggest(db_session, content, "Python")

        assert "import" in suggestions
        assert "pandas" in suggestions
        assert "database" in suggestions
        assert "performance" in suggestions

    @pytest.mark.asyncio
    async def test_popular_tags_that_appear_in_content(self, db_session, make_snippet):
        await make_snippet("A", "a", tags=["kubernetes"])

        suggestions = await self.service.suggest(db_session, "kubectl apply for Kubernetes", "")

        assert "kubernetes" in suggestions

    @pytest.mark.asyncio
    async def test_capped(self, db_session):
        content = (
            "async await promise fetch react node express api database sort util "
            "test config auth cache"
        )

        suggestions = await self.service.suggest(db_session, content, "javascript")

        assert len(suggestions) == MAX_SUGGESTIONS


class TestFavorites:

    def setup_method(self):
        self.service = FavoriteService()

    @pytest.mark.asyncio
    async def test_add_twice_conflicts(self, db_session, make_snippet):
        snippet = await make_snippet("A", "a")

        status = await self.service.add(db_session, snippet.id)

        assert status.is_favorite is True
        with pytest.raises(ConflictError):
            await self.service.add(db_session, snippet.id)

    @pytest.mark.asyncio
    async def test_add_missing_snippet(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.add(db_session, 999)

    @pytest.mark.asyncio
    async def test_remove_absent_favorite(self, db_session, make_snippet):
        snippet = await make_snippet("A", "a")

        with pytest.raises(NotFoundError):
            await self.service.remove(db_session, snippet.id)

    @pytest.mark.asyncio
    async def test_toggle(self, db_session, make_snippet):
        snippet = await make_snippet("A", "a")

        first = await self.service.toggle(db_session, snippet.id)
        second = await self.service.toggle(db_session, snippet.id)

        assert first.is_favorite is True
        assert second.is_favorite is False
        assert await self.service.is_favorite(db_session, snippet.id) is False

    @pytest.mark.asyncio
    async def test_mark_is_idempotent(self, db_session, make_snippet):
        snippet = await make_snippet("A", "a")

        assert await self.service.mark(db_session, snippet.id) is True
        assert await self.service.mark(db_session, snippet.id) is False
        assert await self.service.favorite_ids(db_session, [snippet.id, 42]) == {snippet.id}

    @pytest.mark.asyncio
    async def test_list_newest_favorite_first(self, db_session, make_snippet):
        first = await make_snippet("First", "1", tags=["x"])
        second = await make_snippet("Second", "2")
        await self.service.add(db_session, first.id)
        await self.service.add(db_session, second.id)

        favorites = await snippet_service.list_favorites(db_session)

        assert [f.id for f in favorites] == [second.id, first.id]
        assert favorites[1].tags[0].name == "x"
        assert all(f.is_favorite for f in favorites)
