"""
SnippetHub Backend — Analytics Route Handlers
===============================================

Read-only dashboard endpoints; see AnalyticsService for the aggregates.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.analytics import (
    AnalyticsOverview,
    LanguageDetail,
    SearchInsights,
    TrendsResponse,
)
from app.services.analytics_service import analytics_service

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("", response_model=AnalyticsOverview, summary="Dashboard overview")
async def overview(db: AsyncSession = Depends(get_db_session)) -> AnalyticsOverview:
    return await analytics_service.overview(db)


@router.get("/languages", response_model=List[LanguageDetail], summary="Per-language statistics")
async def languages(db: AsyncSession = Depends(get_db_session)) -> List[LanguageDetail]:
    return await analytics_service.languages(db)


@router.get("/trends", response_model=TrendsResponse, summary="Activity over a period")
async def trends(
    period: int = Query(default=30, ge=1, le=365, description="Window in days"),
    db: AsyncSession = Depends(get_db_session),
) -> TrendsResponse:
    return await analytics_service.trends(db, period)


@router.get("/search-insights", response_model=SearchInsights, summary="Title words and tagging gaps")
async def search_insights(db: AsyncSession = Depends(get_db_session)) -> SearchInsights:
    return await analytics_service.search_insights(db)
