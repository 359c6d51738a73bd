"""
SnippetHub Backend — Versioning Engine
========================================

What:  The only code path that modifies an existing snippet's title,
       content, language or source.
How:   Before a change to title or content is applied, the current values
       are copied into a `versions` row stamped with the current version
       number, and the live version is bumped. Language/source-only edits
       update the snippet without a snapshot.
Who:   SnippetService (update, rollback), TransferService (overwrite import).

Invariants:
    - The live version equals 1 + the number of snapshots.
    - Snapshot version numbers for one snippet are 1..N with no gaps;
      (snippet_id, version_number) is unique in the table.
    - Rollback is an ordinary update: it snapshots the state it replaces,
      so history is never rewritten. Rolling back to a snapshot whose
      title and content already match the live snippet adds no snapshot
      and keeps the version.
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.snippet import Snippet, SnippetVersion, utcnow

logger = logging.getLogger(__name__)


class VersionService:

    async def get_snippet(self, db: AsyncSession, snippet_id: int) -> Snippet:
        result = await db.execute(select(Snippet).where(Snippet.id == snippet_id))
        snippet = result.scalar_one_or_none()
        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=snippet_id)
        return snippet

    async def apply_update(
        self,
        db: AsyncSession,
        snippet_id: int,
        title: str,
        content: str,
        language: str,
        source: Optional[str],
    ) -> Snippet:
        """
        Apply a full field update, snapshotting first when title or content changes.

        Returns:
            The updated (flushed) Snippet.

        Raises:
            NotFoundError: the snippet does not exist
        """
        snippet = await self.get_snippet(db, snippet_id)

        if snippet.title != title or snippet.content != content:
            db.add(
                SnippetVersion(
                    snippet_id=snippet.id,
                    title=snippet.title,
                    content=snippet.content,
                    language=snippet.language,
                    source=snippet.source,
                    version_number=snippet.version,
                )
            )
            snippet.version = snippet.version + 1
            logger.info("Snippet %d: snapshot v%d taken", snippet.id, snippet.version - 1)

        snippet.title = title
        snippet.content = content
        snippet.language = language
        snippet.source = source
        snippet.updated_at = utcnow()

        await db.flush()
        return snippet

    async def list_versions(self, db: AsyncSession, snippet_id: int) -> List[SnippetVersion]:
        """Snapshots of a snippet, newest first. Empty for a never-edited snippet."""
        await self.get_snippet(db, snippet_id)
        result = await db.execute(
            select(SnippetVersion)
            .where(SnippetVersion.snippet_id == snippet_id)
            .order_by(desc(SnippetVersion.version_number))
        )
        return list(result.scalars().all())

    async def get_version(
        self, db: AsyncSession, snippet_id: int, version_number: int
    ) -> SnippetVersion:
        result = await db.execute(
            select(SnippetVersion)
            .where(
                SnippetVersion.snippet_id == snippet_id,
                SnippetVersion.version_number == version_number,
            )
        )
        snapshot = result.scalar_one_or_none()
        if snapshot is None:
            raise NotFoundError(
                resource="version",
                resource_id=version_number,
                context={"snippet_id": snippet_id},
            )
        return snapshot

    async def rollback(self, db: AsyncSession, snippet_id: int, version_number: int) -> Snippet:
        """
        Restore the fields recorded in snapshot `version_number`.

        The restore goes through `apply_update`, so the replaced state is
        itself snapshotted and the version moves forward.
        """
        snapshot = await self.get_version(db, snippet_id, version_number)
        logger.info("Snippet %d: rolling back to v%d", snippet_id, version_number)
        return await self.apply_update(
            db,
            snippet_id,
            title=snapshot.title,
            content=snapshot.content,
            language=snapshot.language,
            source=snapshot.source,
        )


version_service = VersionService()
