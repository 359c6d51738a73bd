"""
SnippetHub Backend — Snippet Service (Business Logic Orchestrator)
====================================================================

What:  Snippet CRUD plus the query/filter façade used by the list endpoint.
How:   Composes VersionService (every modification of an existing snippet),
       TagService (links) and FavoriteService (flags and filter). Responses
       are assembled with two batch queries per page: one for tags, one for
       favorite flags.
Who:   Snippet and favorites routes.

Design Decision:
    SnippetService is stateless; it receives the db session for each call.
    Mutations flush but never commit: the request's session dependency
    owns the transaction.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import asc, desc, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, ValidationError
from app.models.snippet import Snippet, SnippetVersion
from app.models.tag import SnippetTag, Tag
from app.schemas.snippet import (
    FavoriteSnippetResponse,
    SnippetCreate,
    SnippetResponse,
    SnippetUpdate,
    TagRef,
    VersionResponse,
)
from app.services.favorite_service import favorite_service
from app.services.tag_service import tag_service
from app.services.version_service import version_service

logger = logging.getLogger(__name__)

# Whitelisted sort columns; anything else is rejected with a 400.
SORT_COLUMNS = {
    "created_at": Snippet.created_at,
    "updated_at": Snippet.updated_at,
    "title": Snippet.title,
    "language": Snippet.language,
    "version": Snippet.version,
}
SORT_ORDERS = ("asc", "desc")


class SnippetService:
    """
    Business logic layer for snippet operations.

    Responsibilities:
        - create_snippet(): insert + tag links
        - get_snippet() / list_snippets(): reads with tags and favorite flags
        - update_snippet(): field update through the versioning engine,
          tags replaced when supplied
        - delete_snippet(): removal; versions, links and favorite cascade
        - list_versions() / rollback_snippet(): version history endpoints
        - list_favorites(): favorited snippets with favorited_at
    """

    async def create_snippet(self, db: AsyncSession, data: SnippetCreate) -> SnippetResponse:
        snippet = Snippet(
            title=data.title,
            content=data.content,
            language=data.language,
            source=data.source,
        )
        db.add(snippet)
        await db.flush()
        await db.refresh(snippet)

        tags = await tag_service.set_snippet_tags(db, snippet.id, [(n, None) for n in data.tags])
        logger.info(
            "Snippet created: id=%d language=%s tags=%d",
            snippet.id, snippet.language, len(tags),
        )
        return self._to_response(snippet, tags, False)

    async def get_snippet(self, db: AsyncSession, snippet_id: int) -> SnippetResponse:
        """Raises NotFoundError when the snippet does not exist."""
        snippet = await version_service.get_snippet(db, snippet_id)
        return (await self.to_responses(db, [snippet]))[0]

    async def list_snippets(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        language: Optional[str] = None,
        tag: Optional[str] = None,
        favorites_only: bool = False,
        sort: str = "created_at",
        order: str = "desc",
    ) -> List[SnippetResponse]:
        """
        Filtered, sorted snippet list.

        Filters combine with AND:
            search:    case-insensitive substring of title or content
            language:  exact language label
            tag:       snippet linked to a tag with this exact name
            favorites: favorites only
        """
        column = SORT_COLUMNS.get(sort)
        if column is None:
            raise ValidationError(
                message=f"Invalid sort field '{sort}'. Use one of: {', '.join(SORT_COLUMNS)}",
                field="sort",
            )
        order = order.lower()
        if order not in SORT_ORDERS:
            raise ValidationError(message="Invalid sort order. Use 'asc' or 'desc'", field="order")

        query = select(Snippet)
        if search:
            query = query.where(
                or_(
                    Snippet.title.icontains(search, autoescape=True),
                    Snippet.content.icontains(search, autoescape=True),
                )
            )
        if language:
            query = query.where(Snippet.language == language)
        if tag:
            query = query.where(
                Snippet.id.in_(
                    select(SnippetTag.snippet_id)
                    .join(Tag, Tag.id == SnippetTag.tag_id)
                    .where(Tag.name == tag)
                )
            )
        if favorites_only:
            query = query.where(Snippet.id.in_(favorite_service.favorited_ids_query()))

        direction = asc if order == "asc" else desc
        query = query.order_by(direction(column), direction(Snippet.id))

        try:
            result = await db.execute(query)
            snippets = list(result.scalars().all())
            return await self.to_responses(db, snippets)
        except SQLAlchemyError as e:
            logger.error("Failed to list snippets: %s", e, exc_info=True)
            raise DatabaseError(context={"operation": "list_snippets"}) from e

    async def update_snippet(
        self, db: AsyncSession, snippet_id: int, data: SnippetUpdate
    ) -> SnippetResponse:
        snippet = await version_service.apply_update(
            db,
            snippet_id,
            title=data.title,
            content=data.content,
            language=data.language,
            source=data.source,
        )
        if data.tags is not None:
            await tag_service.set_snippet_tags(db, snippet.id, [(n, None) for n in data.tags])
        return (await self.to_responses(db, [snippet]))[0]

    async def delete_snippet(self, db: AsyncSession, snippet_id: int) -> None:
        snippet = await version_service.get_snippet(db, snippet_id)
        await db.delete(snippet)
        await db.flush()
        logger.info("Snippet deleted: id=%d", snippet_id)

    async def list_versions(self, db: AsyncSession, snippet_id: int) -> List[VersionResponse]:
        versions: Sequence[SnippetVersion] = await version_service.list_versions(db, snippet_id)
        return [VersionResponse.model_validate(v) for v in versions]

    async def rollback_snippet(
        self, db: AsyncSession, snippet_id: int, version_number: int
    ) -> SnippetResponse:
        snippet = await version_service.rollback(db, snippet_id, version_number)
        return (await self.to_responses(db, [snippet]))[0]

    async def list_favorites(self, db: AsyncSession) -> List[FavoriteSnippetResponse]:
        """Favorited snippets, most recently favorited first."""
        entries = await favorite_service.favorited_entries(db)
        tags_by_id = await tag_service.tags_for(db, [s.id for s, _ in entries])
        return [
            FavoriteSnippetResponse(
                **self._to_response(snippet, tags_by_id.get(snippet.id, []), True).model_dump(),
                favorited_at=favorited_at,
            )
            for snippet, favorited_at in entries
        ]

    # ── Response assembly ─────────────────────────────────────────────────

    async def to_responses(
        self, db: AsyncSession, snippets: Sequence[Snippet]
    ) -> List[SnippetResponse]:
        ids = [s.id for s in snippets]
        tags_by_id: Dict[int, List[Tag]] = await tag_service.tags_for(db, ids)
        favorites = await favorite_service.favorite_ids(db, ids)
        return [
            self._to_response(s, tags_by_id.get(s.id, []), s.id in favorites)
            for s in snippets
        ]

    @staticmethod
    def _to_response(snippet: Snippet, tags: Sequence[Tag], is_favorite: bool) -> SnippetResponse:
        updated_at: datetime = snippet.updated_at or snippet.created_at
        return SnippetResponse(
            id=snippet.id,
            title=snippet.title,
            content=snippet.content,
            language=snippet.language,
            source=snippet.source,
            version=snippet.version,
            created_at=snippet.created_at,
            updated_at=updated_at,
            tags=[TagRef.model_validate(t) for t in tags],
            is_favorite=is_favorite,
        )


snippet_service = SnippetService()
