"""
SnippetHub Backend — Diff Generator
=====================================

What:  Unified, line-oriented diff between a stored snapshot and the live
       snippet.
How:   `difflib.unified_diff` with three lines of context. The snapshot is
       the old side, the live snippet the new side; identical contents
       produce an empty string.
"""

import difflib
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.snippet import DiffResponse, DiffSide
from app.services.version_service import version_service

logger = logging.getLogger(__name__)

CONTEXT_LINES = 3


def unified_text_diff(
    old_text: str,
    new_text: str,
    old_label: str = "old",
    new_label: str = "new",
    context: int = CONTEXT_LINES,
) -> str:
    """Return unified-diff text for two strings ("" when they are equal)."""
    lines = list(
        difflib.unified_diff(
            old_text.splitlines(),
            new_text.splitlines(),
            fromfile=old_label,
            tofile=new_label,
            n=context,
            lineterm="",
        )
    )
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def _header_label(title: str, suffix: str) -> str:
    """Title plus suffix on one line; newlines in the title become spaces."""
    return " ".join(title.splitlines() + [suffix])


class DiffService:

    async def diff(self, db: AsyncSession, snippet_id: int, version_number: int) -> DiffResponse:
        """
        Compare snapshot `version_number` with the live snippet.

        Raises:
            NotFoundError: unknown snippet or unknown version
        """
        snippet = await version_service.get_snippet(db, snippet_id)
        snapshot = await version_service.get_version(db, snippet_id, version_number)

        text = unified_text_diff(
            snapshot.content,
            snippet.content,
            old_label=_header_label(snapshot.title, f"(v{snapshot.version_number})"),
            new_label=_header_label(snippet.title, "(current)"),
        )
        logger.debug(
            "Diff snippet %d v%d → v%d: %d chars",
            snippet_id, version_number, snippet.version, len(text),
        )
        return DiffResponse(
            current=DiffSide(title=snippet.title, content=snippet.content, version=snippet.version),
            version=DiffSide(
                title=snapshot.title, content=snapshot.content, version=snapshot.version_number
            ),
            diff=text,
        )


diff_service = DiffService()
