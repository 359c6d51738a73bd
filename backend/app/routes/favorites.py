"""
SnippetHub Backend — Favorites Route Handlers
===============================================

Routes:
    GET    /api/favorites              favorited snippets, newest favorite first
    POST   /api/favorites/{id}         add (409 if already favorited)
    DELETE /api/favorites/{id}         remove (404 if not favorited)
    POST   /api/favorites/toggle/{id}  flip
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.snippet import FavoriteSnippetResponse
from app.schemas.tag import FavoriteStatus
from app.services.favorite_service import favorite_service
from app.services.snippet_service import snippet_service

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.get("", response_model=List[FavoriteSnippetResponse], summary="List favorites")
async def list_favorites(db: AsyncSession = Depends(get_db_session)) -> List[FavoriteSnippetResponse]:
    return await snippet_service.list_favorites(db)


@router.post(
    "/toggle/{snippet_id}",
    response_model=FavoriteStatus,
    responses={404: {"description": "Snippet not found", "model": ErrorResponse}},
    summary="Toggle favorite status",
)
async def toggle_favorite(
    snippet_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> FavoriteStatus:
    return await favorite_service.toggle(db, snippet_id)


@router.post(
    "/{snippet_id}",
    response_model=FavoriteStatus,
    status_code=201,
    responses={
        404: {"description": "Snippet not found", "model": ErrorResponse},
        409: {"description": "Already favorited", "model": ErrorResponse},
    },
    summary="Add to favorites",
)
async def add_favorite(
    snippet_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> FavoriteStatus:
    return await favorite_service.add(db, snippet_id)


@router.delete(
    "/{snippet_id}",
    response_model=FavoriteStatus,
    responses={404: {"description": "Not a favorite", "model": ErrorResponse}},
    summary="Remove from favorites",
)
async def remove_favorite(
    snippet_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> FavoriteStatus:
    return await favorite_service.remove(db, snippet_id)
