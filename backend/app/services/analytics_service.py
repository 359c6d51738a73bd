"""
SnippetHub Backend — Analytics Service
========================================

What:  Read-only aggregates for the dashboard: totals, language and tag
       distributions, activity over time, edit and favorite leaders.
How:   Counting and ordering run in SQL; grouping by calendar day or month
       is done in Python over the fetched timestamps, so no query depends
       on a dialect's date functions.
"""

import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Set

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.favorite import Favorite
from app.models.snippet import Snippet, utcnow
from app.models.tag import SnippetTag, Tag
from app.schemas.analytics import (
    AnalyticsOverview,
    AnalyticsSummary,
    CreationPoint,
    DailyCount,
    EditStat,
    FavoritePoint,
    FavoriteStat,
    LanguageDetail,
    LanguagePoint,
    LanguageShare,
    MonthlyCount,
    SearchInsights,
    TagCount,
    TagUsage,
    TrendsResponse,
    WordFrequency,
)

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 30
GROWTH_WINDOW_DAYS = 365
TOP_TAGS = 10
TOP_LIST = 5
TOP_TAGS_PER_LANGUAGE = 3
TOP_TITLE_WORDS = 20
MIN_WORD_LENGTH = 3


def _day(ts: datetime) -> str:
    return ts.date().isoformat()


def _month(ts: datetime) -> str:
    return ts.strftime("%Y-%m")


def _title_words(title: str) -> List[str]:
    """Lower-cased words of a title, split on spaces and hyphens."""
    return [
        word
        for word in (part.strip().lower() for part in title.replace("-", " ").split())
        if len(word) >= MIN_WORD_LENGTH
    ]


class AnalyticsService:

    async def _count(self, db: AsyncSession, model) -> int:
        result = await db.execute(select(func.count()).select_from(model))
        return int(result.scalar_one())

    async def _created_since(self, db: AsyncSession, column, days: int) -> List[datetime]:
        cutoff = utcnow() - timedelta(days=days)
        result = await db.execute(select(column).where(column >= cutoff))
        return [ts for ts in result.scalars().all() if ts is not None]

    # ── GET /api/analytics ────────────────────────────────────────────────

    async def overview(self, db: AsyncSession) -> AnalyticsOverview:
        total_snippets = await self._count(db, Snippet)
        summary = AnalyticsSummary(
            total_snippets=total_snippets,
            total_tags=await self._count(db, Tag),
            total_favorites=await self._count(db, Favorite),
        )

        count = func.count(Snippet.id)
        rows = (
            await db.execute(
                select(Snippet.language, count)
                .group_by(Snippet.language)
                .order_by(desc(count), asc(Snippet.language))
            )
        ).all()
        languages = [
            LanguageShare(
                name=language,
                value=n,
                percentage=round(n * 100.0 / total_snippets, 1) if total_snippets else 0.0,
            )
            for language, n in rows
        ]

        usage = func.count(SnippetTag.snippet_id)
        rows = (
            await db.execute(
                select(Tag.name, Tag.color, usage)
                .outerjoin(SnippetTag, SnippetTag.tag_id == Tag.id)
                .group_by(Tag.id, Tag.name, Tag.color)
                .order_by(desc(usage), asc(Tag.name))
                .limit(TOP_TAGS)
            )
        ).all()
        popular_tags = [TagUsage(name=name, color=color, count=n) for name, color, n in rows]

        per_day = Counter(
            _day(ts) for ts in await self._created_since(db, Snippet.created_at, RECENT_ACTIVITY_DAYS)
        )
        recent = [DailyCount(date=d, count=n) for d, n in sorted(per_day.items(), reverse=True)]

        fav_count = func.count(Favorite.id)
        rows = (
            await db.execute(
                select(Snippet.id, Snippet.title, Snippet.language, fav_count)
                .join(Favorite, Favorite.snippet_id == Snippet.id)
                .group_by(Snippet.id, Snippet.title, Snippet.language)
                .order_by(desc(fav_count), desc(func.max(Favorite.created_at)))
                .limit(TOP_LIST)
            )
        ).all()
        top_favorites = [
            FavoriteStat(id=i, title=t, language=lang, favorite_count=n) for i, t, lang, n in rows
        ]

        rows = (
            await db.execute(
                select(Snippet.id, Snippet.title, Snippet.language, Snippet.version)
                .order_by(desc(Snippet.version), asc(Snippet.id))
                .limit(TOP_LIST)
            )
        ).all()
        most_edited = [EditStat(id=i, title=t, language=lang, version=v) for i, t, lang, v in rows]

        per_month = Counter(
            _month(ts) for ts in await self._created_since(db, Snippet.created_at, GROWTH_WINDOW_DAYS)
        )
        growth = [MonthlyCount(month=m, count=n) for m, n in sorted(per_month.items(), reverse=True)]

        return AnalyticsOverview(
            summary=summary,
            language_distribution=languages,
            popular_tags=popular_tags,
            recent_activity=recent,
            top_favorites=top_favorites,
            most_edited=most_edited,
            monthly_growth=growth,
        )

    # ── GET /api/analytics/languages ──────────────────────────────────────

    async def languages(self, db: AsyncSession) -> List[LanguageDetail]:
        """Per-language statistics, most used language first."""
        snippets = (
            await db.execute(select(Snippet.id, Snippet.language, Snippet.version, Snippet.created_at))
        ).all()
        links = (
            await db.execute(
                select(SnippetTag.snippet_id, Tag.id, Tag.name).join(Tag, Tag.id == SnippetTag.tag_id)
            )
        ).all()
        favorites: Set[int] = set((await db.execute(select(Favorite.snippet_id))).scalars().all())

        language_of: Dict[int, str] = {}
        grouped: Dict[str, list] = defaultdict(list)
        for snippet_id, language, version, created_at in snippets:
            language_of[snippet_id] = language
            grouped[language].append((snippet_id, version, created_at))

        tag_ids: Dict[str, Set[int]] = defaultdict(set)
        tag_counts: Dict[str, Counter] = defaultdict(Counter)
        for snippet_id, tag_id, tag_name in links:
            language = language_of.get(snippet_id)
            if language is None:
                continue
            tag_ids[language].add(tag_id)
            tag_counts[language][tag_name] += 1

        details = []
        for language, rows in grouped.items():
            last_used = max((ts for _, _, ts in rows if ts is not None), default=None)
            top = sorted(tag_counts[language].items(), key=lambda kv: (-kv[1], kv[0]))
            details.append(
                LanguageDetail(
                    language=language,
                    snippet_count=len(rows),
                    unique_tags=len(tag_ids[language]),
                    favorite_count=sum(1 for sid, _, _ in rows if sid in favorites),
                    avg_versions=round(sum(v for _, v, _ in rows) / len(rows), 2),
                    last_used=last_used.isoformat() if last_used else None,
                    top_tags=[TagCount(name=n, count=c) for n, c in top[:TOP_TAGS_PER_LANGUAGE]],
                )
            )
        details.sort(key=lambda d: (-d.snippet_count, d.language))
        return details

    # ── GET /api/analytics/trends ─────────────────────────────────────────

    async def trends(self, db: AsyncSession, period_days: int = 30) -> TrendsResponse:
        cutoff = utcnow() - timedelta(days=period_days)

        rows = (
            await db.execute(
                select(Snippet.created_at, Snippet.language).where(Snippet.created_at >= cutoff)
            )
        ).all()
        created = Counter(_day(ts) for ts, _ in rows)
        by_language = Counter((_day(ts), language) for ts, language in rows)
        favorited = Counter(
            _day(ts) for ts in await self._created_since(db, Favorite.created_at, period_days)
        )

        return TrendsResponse(
            period_days=period_days,
            creation_trend=[
                CreationPoint(date=d, snippets_created=n) for d, n in sorted(created.items())
            ],
            favorites_trend=[
                FavoritePoint(date=d, favorites_added=n) for d, n in sorted(favorited.items())
            ],
            language_trend=[
                LanguagePoint(date=d, language=lang, count=n)
                for (d, lang), n in sorted(by_language.items(), key=lambda kv: (kv[0][0], -kv[1], kv[0][1]))
            ],
        )

    # ── GET /api/analytics/search-insights ────────────────────────────────

    async def search_insights(self, db: AsyncSession) -> SearchInsights:
        titles = (await db.execute(select(Snippet.title))).scalars().all()
        words = Counter(word for title in titles for word in _title_words(title))
        common = sorted(
            ((w, n) for w, n in words.items() if n > 1), key=lambda kv: (-kv[1], kv[0])
        )[:TOP_TITLE_WORDS]

        total = len(titles)
        tagged = (
            await db.execute(select(func.count(func.distinct(SnippetTag.snippet_id))))
        ).scalar_one()
        links = (await db.execute(select(func.count(SnippetTag.id)))).scalar_one()

        return SearchInsights(
            common_title_words=[WordFrequency(word=w, frequency=n) for w, n in common],
            untagged_snippets=total - int(tagged),
            average_tags_per_snippet=round(int(links) / total, 2) if total else 0.0,
        )


analytics_service = AnalyticsService()
