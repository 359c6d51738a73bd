"""
SnippetHub Backend — Favorite Service
=======================================

What:  The single accessor for favorite state.
How:   A snippet is a favorite when a `favorites` row exists for it. This
       service is the only code that reads or writes that table; everyone
       else asks `is_favorite()` / `favorite_ids()` or uses
       `favorited_ids_query()` as a filter.
Who:   Favorites routes, SnippetService (flags + filter), TransferService
       (export flag, import marker), AnalyticsService (counts).
"""

import logging
from datetime import datetime
from typing import Iterable, List, Set, Tuple

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.exceptions import ConflictError, NotFoundError
from app.models.favorite import Favorite
from app.models.snippet import Snippet
from app.schemas.tag import FavoriteStatus

logger = logging.getLogger(__name__)


class FavoriteService:
    """Stateless; every method receives the caller's session."""

    # ── Read accessors ────────────────────────────────────────────────────

    async def is_favorite(self, db: AsyncSession, snippet_id: int) -> bool:
        result = await db.execute(
            select(Favorite.id).where(Favorite.snippet_id == snippet_id)
        )
        return result.scalar_one_or_none() is not None

    async def favorite_ids(self, db: AsyncSession, snippet_ids: Iterable[int]) -> Set[int]:
        """Subset of `snippet_ids` that are favorites (one query for a whole page)."""
        ids = list(snippet_ids)
        if not ids:
            return set()
        result = await db.execute(
            select(Favorite.snippet_id).where(Favorite.snippet_id.in_(ids))
        )
        return set(result.scalars().all())

    def favorited_ids_query(self) -> Select:
        """Sub-select of favorited snippet ids, for `Snippet.id.in_(...)` filters."""
        return select(Favorite.snippet_id)

    async def favorited_entries(self, db: AsyncSession) -> List[Tuple[Snippet, datetime]]:
        """Favorited snippets with their favorited_at, most recent first."""
        result = await db.execute(
            select(Snippet, Favorite.created_at)
            .join(Favorite, Favorite.snippet_id == Snippet.id)
            .order_by(desc(Favorite.created_at), desc(Favorite.id))
        )
        return [(row[0], row[1]) for row in result.all()]

    # ── Idempotent writers (used by import) ───────────────────────────────

    async def mark(self, db: AsyncSession, snippet_id: int) -> bool:
        """Ensure a marker exists. Returns True when one was created."""
        if await self.is_favorite(db, snippet_id):
            return False
        db.add(Favorite(snippet_id=snippet_id))
        await db.flush()
        return True

    async def unmark(self, db: AsyncSession, snippet_id: int) -> bool:
        """Remove the marker if present. Returns True when one was deleted."""
        result = await db.execute(
            delete(Favorite).where(Favorite.snippet_id == snippet_id)
        )
        return (result.rowcount or 0) > 0

    async def set_favorite(self, db: AsyncSession, snippet_id: int, value: bool) -> None:
        if value:
            await self.mark(db, snippet_id)
        else:
            await self.unmark(db, snippet_id)

    # ── Endpoint operations ───────────────────────────────────────────────

    async def add(self, db: AsyncSession, snippet_id: int) -> FavoriteStatus:
        """
        Favorite a snippet.

        Raises:
            NotFoundError: snippet does not exist (→ 404)
            ConflictError: already a favorite (→ 409)
        """
        await self._require_snippet(db, snippet_id)
        if not await self.mark(db, snippet_id):
            raise ConflictError(
                message="Snippet is already favorited",
                context={"snippet_id": snippet_id},
            )
        logger.info("Snippet %d added to favorites", snippet_id)
        return FavoriteStatus(
            message="Snippet added to favorites", snippet_id=snippet_id, is_favorite=True
        )

    async def remove(self, db: AsyncSession, snippet_id: int) -> FavoriteStatus:
        """Raises NotFoundError when the snippet is not a favorite."""
        if not await self.unmark(db, snippet_id):
            raise NotFoundError(resource="favorite", resource_id=snippet_id)
        logger.info("Snippet %d removed from favorites", snippet_id)
        return FavoriteStatus(
            message="Snippet removed from favorites", snippet_id=snippet_id, is_favorite=False
        )

    async def toggle(self, db: AsyncSession, snippet_id: int) -> FavoriteStatus:
        await self._require_snippet(db, snippet_id)
        if await self.unmark(db, snippet_id):
            return FavoriteStatus(
                message="Snippet removed from favorites", snippet_id=snippet_id, is_favorite=False
            )
        await self.mark(db, snippet_id)
        return FavoriteStatus(
            message="Snippet added to favorites", snippet_id=snippet_id, is_favorite=True
        )

    async def _require_snippet(self, db: AsyncSession, snippet_id: int) -> None:
        if await db.get(Snippet, snippet_id) is None:
            raise NotFoundError(resource="snippet", resource_id=snippet_id)


favorite_service = FavoriteService()
