"""
SnippetHub Backend — Analytics Schemas
========================================

What:  Read-only aggregates over the snippet corpus for dashboards.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class AnalyticsSummary(BaseModel):
    total_snippets: int
    total_tags: int
    total_favorites: int


class LanguageShare(BaseModel):
    name: str
    value: int
    percentage: float = Field(description="Share of all snippets, one decimal")


class TagUsage(BaseModel):
    name: str
    color: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class MonthlyCount(BaseModel):
    month: str
    count: int


class FavoriteStat(BaseModel):
    id: int
    title: str
    language: str
    favorite_count: int


class EditStat(BaseModel):
    id: int
    title: str
    language: str
    version: int


class AnalyticsOverview(BaseModel):
    """GET /api/analytics"""
    summary: AnalyticsSummary
    language_distribution: List[LanguageShare]
    popular_tags: List[TagUsage]
    recent_activity: List[DailyCount]
    top_favorites: List[FavoriteStat]
    most_edited: List[EditStat]
    monthly_growth: List[MonthlyCount]


class TagCount(BaseModel):
    name: str
    count: int


class LanguageDetail(BaseModel):
    """GET /api/analytics/languages item"""
    language: str
    snippet_count: int
    unique_tags: int
    favorite_count: int
    avg_versions: float
    last_used: Optional[str] = None
    top_tags: List[TagCount] = Field(default_factory=list)


class CreationPoint(BaseModel):
    date: str
    snippets_created: int


class FavoritePoint(BaseModel):
    date: str
    favorites_added: int


class LanguagePoint(BaseModel):
    date: str
    language: str
    count: int


class TrendsResponse(BaseModel):
    """GET /api/analytics/trends"""
    period_days: int
    creation_trend: List[CreationPoint]
    favorites_trend: List[FavoritePoint]
    language_trend: List[LanguagePoint]


class WordFrequency(BaseModel):
    word: str
    frequency: int


class SearchInsights(BaseModel):
    """GET /api/analytics/search-insights"""
    common_title_words: List[WordFrequency]
    untagged_snippets: int
    average_tags_per_snippet: float
