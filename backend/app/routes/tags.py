"""
SnippetHub Backend — Tag Route Handlers
=========================================

Routes:
    GET    /api/tags               list with usage counts
    GET    /api/tags/suggestions   suggestions for a draft snippet
    POST   /api/tags               create (409 on duplicate name)
    PUT    /api/tags/{id}          rename / recolor (409 on name clash)
    DELETE /api/tags/{id}          delete an unused tag (409 when in use)
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.tag import TagCreate, TagResponse, TagUpdate
from app.services.tag_service import tag_service

router = APIRouter(prefix="/api/tags", tags=["Tags"])

_CONFLICT = {409: {"description": "Conflicts with existing tags or links", "model": ErrorResponse}}


@router.get("", response_model=List[TagResponse], summary="List tags by usage")
async def list_tags(db: AsyncSession = Depends(get_db_session)) -> List[TagResponse]:
    return await tag_service.list_tags(db)


@router.get("/suggestions", response_model=List[str], summary="Suggest tags for content")
async def suggest_tags(
    content: str = Query(default=""),
    language: str = Query(default=""),
    db: AsyncSession = Depends(get_db_session),
) -> List[str]:
    return await tag_service.suggest(db, content, language)


@router.post("", response_model=TagResponse, status_code=201, responses=_CONFLICT, summary="Create a tag")
async def create_tag(
    payload: TagCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    return await tag_service.create_tag(db, payload.name, payload.color)


@router.put("/{tag_id}", response_model=TagResponse, responses=_CONFLICT, summary="Update a tag")
async def update_tag(
    tag_id: int,
    payload: TagUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    return await tag_service.update_tag(db, tag_id, payload.name, payload.color)


@router.delete("/{tag_id}", response_model=MessageResponse, responses=_CONFLICT, summary="Delete a tag")
async def delete_tag(
    tag_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await tag_service.delete_tag(db, tag_id)
    return MessageResponse(message="Tag deleted successfully")
