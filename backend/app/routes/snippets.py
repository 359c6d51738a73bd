"""
SnippetHub Backend — Snippet Route Handlers
=============================================

What:  CRUD, version history, rollback and diff for snippets.
How:   Extracts path/query/body data, delegates to SnippetService,
       VersionService or DiffService, returns JSON.

Routes:
    GET    /api/snippets                        list (filters + sort)
    POST   /api/snippets                        create
    GET    /api/snippets/{id}                   detail
    PUT    /api/snippets/{id}                   update (versioned)
    DELETE /api/snippets/{id}                   delete
    GET    /api/snippets/{id}/versions          snapshot history
    POST   /api/snippets/{id}/rollback          restore a snapshot
    GET    /api/snippets/{id}/diff/{version}    snapshot vs. live diff
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.snippet import (
    DiffResponse,
    RollbackRequest,
    SnippetCreate,
    SnippetResponse,
    SnippetUpdate,
    VersionResponse,
)
from app.services.diff_service import diff_service
from app.services.snippet_service import snippet_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/snippets", tags=["Snippets"])

_NOT_FOUND = {404: {"description": "Snippet not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[SnippetResponse],
    responses={400: {"description": "Invalid sort field or order", "model": ErrorResponse}},
    summary="List snippets",
)
async def list_snippets(
    search: Optional[str] = Query(default=None, description="Substring of title or content"),
    language: Optional[str] = Query(default=None, description="Exact language label"),
    tag: Optional[str] = Query(default=None, description="Tag name"),
    favorites: bool = Query(default=False, description="Only favorited snippets"),
    sort: str = Query(default="created_at", description="created_at, updated_at, title, language or version"),
    order: str = Query(default="desc", description="asc or desc"),
    db: AsyncSession = Depends(get_db_session),
) -> List[SnippetResponse]:
    return await snippet_service.list_snippets(
        db,
        search=search,
        language=language,
        tag=tag,
        favorites_only=favorites,
        sort=sort,
        order=order,
    )


@router.post(
    "",
    response_model=SnippetResponse,
    status_code=201,
    summary="Create a snippet",
)
async def create_snippet(
    payload: SnippetCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SnippetResponse:
    return await snippet_service.create_snippet(db, payload)


@router.get(
    "/{snippet_id}",
    response_model=SnippetResponse,
    responses=_NOT_FOUND,
    summary="Get a snippet with its tags and favorite flag",
)
async def get_snippet(
    snippet_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> SnippetResponse:
    return await snippet_service.get_snippet(db, snippet_id)


@router.put(
    "/{snippet_id}",
    response_model=SnippetResponse,
    responses=_NOT_FOUND,
    summary="Update a snippet",
    description=(
        "Replaces title, content, language and source. A change to title or "
        "content snapshots the previous state and bumps the version. Tags are "
        "replaced when the `tags` list is present."
    ),
)
async def update_snippet(
    snippet_id: int,
    payload: SnippetUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> SnippetResponse:
    return await snippet_service.update_snippet(db, snippet_id, payload)


@router.delete(
    "/{snippet_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a snippet with its history, tag links and favorite marker",
)
async def delete_snippet(
    snippet_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await snippet_service.delete_snippet(db, snippet_id)
    return MessageResponse(message="Snippet deleted successfully")


@router.get(
    "/{snippet_id}/versions",
    response_model=List[VersionResponse],
    responses=_NOT_FOUND,
    summary="Version history, newest first",
)
async def list_versions(
    snippet_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[VersionResponse]:
    return await snippet_service.list_versions(db, snippet_id)


@router.post(
    "/{snippet_id}/rollback",
    response_model=SnippetResponse,
    responses={404: {"description": "Snippet or version not found", "model": ErrorResponse}},
    summary="Restore a previous version",
)
async def rollback_snippet(
    snippet_id: int,
    payload: RollbackRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SnippetResponse:
    return await snippet_service.rollback_snippet(db, snippet_id, payload.version_number)


@router.get(
    "/{snippet_id}/diff/{version_number}",
    response_model=DiffResponse,
    responses={404: {"description": "Snippet or version not found", "model": ErrorResponse}},
    summary="Unified diff between a snapshot and the current snippet",
)
async def diff_snippet(
    snippet_id: int,
    version_number: int,
    db: AsyncSession = Depends(get_db_session),
) -> DiffResponse:
    return await diff_service.diff(db, snippet_id, version_number)
