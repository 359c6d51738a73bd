"""
SnippetHub Backend — Tag Service
==================================

What:  Tag CRUD, usage counts, snippet↔tag linking and content-based tag
       suggestions.
How:   Tags are resolved by name and created on demand when a snippet or an
       import record references one that does not exist yet. Links are
       replaced wholesale (`set_snippet_tags`), never patched.
Who:   Tag routes, SnippetService, TransferService, AnalyticsService.
"""

import logging
import re
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import asc, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, NotFoundError
from app.models.tag import DEFAULT_TAG_COLOR, SnippetTag, Tag
from app.schemas.tag import TagResponse

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 8
POPULAR_TAG_POOL = 10

# Keywords that become suggestions when the snippet's language matches and
# the keyword appears in the content.
LANGUAGE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "javascript": ("async", "await", "promise", "fetch", "react", "node", "express"),
    "python": ("def", "class", "import", "pandas", "numpy", "django", "flask"),
    "rust": ("fn", "struct", "impl", "enum", "match", "cargo"),
    "css": ("selector", "grid", "flexbox", "animation", "responsive"),
    "html": ("element", "attribute", "form", "semantic"),
    "sql": ("select", "insert", "update", "delete", "join", "index"),
    "typescript": ("type", "interface", "generic", "decorator"),
}

# Language-independent concepts, matched on whole words.
GENERAL_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    "api": re.compile(r"\b(api|endpoint|request|response|rest|graphql)\b", re.I),
    "database": re.compile(r"\b(sql|database|db|query|table|schema)\b", re.I),
    "algorithm": re.compile(r"\b(sort|search|tree|graph|algorithm|complexity)\b", re.I),
    "util": re.compile(r"\b(util|helper|function|method|tool)\b", re.I),
    "test": re.compile(r"\b(test|spec|mock|assert|jest|mocha|pytest)\b", re.I),
    "config": re.compile(r"\b(config|setup|environment|settings)\b", re.I),
    "security": re.compile(r"\b(auth|token|jwt|password|encrypt|security)\b", re.I),
    "performance": re.compile(r"\b(performance|optimize|cache|memory|speed)\b", re.I),
}

TagSpec = Tuple[str, Optional[str]]


class TagService:

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def list_tags(self, db: AsyncSession) -> List[TagResponse]:
        """All tags with usage counts, most used first, then by name."""
        usage = func.count(SnippetTag.snippet_id)
        result = await db.execute(
            select(Tag, usage)
            .outerjoin(SnippetTag, SnippetTag.tag_id == Tag.id)
            .group_by(Tag.id)
            .order_by(desc(usage), asc(Tag.name))
        )
        return [self._to_response(tag, count) for tag, count in result.all()]

    async def get_tag(self, db: AsyncSession, tag_id: int) -> Tag:
        tag = await db.get(Tag, tag_id)
        if tag is None:
            raise NotFoundError(resource="tag", resource_id=tag_id)
        return tag

    async def create_tag(
        self, db: AsyncSession, name: str, color: Optional[str] = None
    ) -> TagResponse:
        """Raises ConflictError when the name is taken."""
        if await self._find_by_name(db, name) is not None:
            raise ConflictError(message="Tag already exists", context={"name": name})
        tag = Tag(name=name, color=color or DEFAULT_TAG_COLOR)
        db.add(tag)
        await db.flush()
        await db.refresh(tag)
        logger.info("Tag created: id=%d name=%r", tag.id, tag.name)
        return self._to_response(tag, 0)

    async def update_tag(
        self, db: AsyncSession, tag_id: int, name: str, color: Optional[str] = None
    ) -> TagResponse:
        """Rename and/or recolor. An omitted color keeps the current one."""
        tag = await self.get_tag(db, tag_id)
        clash = await self._find_by_name(db, name)
        if clash is not None and clash.id != tag.id:
            raise ConflictError(message="Tag name already exists", context={"name": name})
        tag.name = name
        if color:
            tag.color = color
        await db.flush()
        return self._to_response(tag, await self.usage_count(db, tag.id))

    async def delete_tag(self, db: AsyncSession, tag_id: int) -> None:
        """
        Delete an unused tag.

        Raises:
            NotFoundError: no such tag
            ConflictError: the tag is still linked; `usage_count` in context
        """
        tag = await self.get_tag(db, tag_id)
        in_use = await self.usage_count(db, tag.id)
        if in_use > 0:
            raise ConflictError(
                message="Cannot delete tag that is in use",
                context={"tag_id": tag.id, "usage_count": in_use},
            )
        await db.delete(tag)
        await db.flush()
        logger.info("Tag deleted: id=%d name=%r", tag_id, tag.name)

    async def usage_count(self, db: AsyncSession, tag_id: int) -> int:
        result = await db.execute(
            select(func.count(SnippetTag.id)).where(SnippetTag.tag_id == tag_id)
        )
        return int(result.scalar_one())

    # ── Linking ───────────────────────────────────────────────────────────

    async def resolve(self, db: AsyncSession, name: str, color: Optional[str] = None) -> Tag:
        """
        Return the tag named `name`, creating it if needed.

        The color only applies to a newly created tag; an existing tag keeps
        its own.
        """
        tag = await self._find_by_name(db, name)
        if tag is None:
            tag = Tag(name=name, color=color or DEFAULT_TAG_COLOR)
            db.add(tag)
            await db.flush()
            logger.debug("Tag created on demand: %r", name)
        return tag

    async def set_snippet_tags(
        self, db: AsyncSession, snippet_id: int, tags: Sequence[TagSpec]
    ) -> List[Tag]:
        """Replace every link of `snippet_id` with `tags` (name, color) pairs."""
        await db.execute(delete(SnippetTag).where(SnippetTag.snippet_id == snippet_id))
        linked: "OrderedDict[int, Tag]" = OrderedDict()
        for name, color in tags:
            tag = await self.resolve(db, name, color)
            if tag.id not in linked:
                linked[tag.id] = tag
                db.add(SnippetTag(snippet_id=snippet_id, tag_id=tag.id))
        await db.flush()
        return list(linked.values())

    async def tags_for(self, db: AsyncSession, snippet_ids: Iterable[int]) -> Dict[int, List[Tag]]:
        """Tags per snippet id for a batch of snippets, each list sorted by name."""
        ids = list(snippet_ids)
        if not ids:
            return {}
        result = await db.execute(
            select(SnippetTag.snippet_id, Tag)
            .join(Tag, Tag.id == SnippetTag.tag_id)
            .where(SnippetTag.snippet_id.in_(ids))
            .order_by(asc(Tag.name))
        )
        by_snippet: Dict[int, List[Tag]] = {}
        for snippet_id, tag in result.all():
            by_snippet.setdefault(snippet_id, []).append(tag)
        return by_snippet

    # ── Suggestions ───────────────────────────────────────────────────────

    async def suggest(self, db: AsyncSession, content: str, language: str = "") -> List[str]:
        """
        Suggest up to eight tag names for a snippet that is being written.

        Sources, in order: language keywords found in the content, general
        concept patterns, and popular existing tags whose name appears in
        the content.
        """
        lowered = content.lower()
        suggestions: "OrderedDict[str, None]" = OrderedDict()

        for keyword in LANGUAGE_KEYWORDS.get(language.strip().lower(), ()):
            if keyword in lowered:
                suggestions[keyword] = None

        for tag_name, pattern in GENERAL_PATTERNS.items():
            if pattern.search(content):
                suggestions[tag_name] = None

        usage = func.count(SnippetTag.snippet_id)
        result = await db.execute(
            select(Tag.name)
            .join(SnippetTag, SnippetTag.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name)
            .order_by(desc(usage), asc(Tag.name))
            .limit(POPULAR_TAG_POOL)
        )
        for name in result.scalars().all():
            if name.lower() in lowered:
                suggestions[name] = None

        return list(suggestions)[:MAX_SUGGESTIONS]

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find_by_name(self, db: AsyncSession, name: str) -> Optional[Tag]:
        result = await db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    @staticmethod
    def _to_response(tag: Tag, usage_count: int) -> TagResponse:
        return TagResponse(
            id=tag.id,
            name=tag.name,
            color=tag.color,
            created_at=tag.created_at,
            usage_count=int(usage_count or 0),
        )


tag_service = TagService()
