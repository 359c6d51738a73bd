"""
SnippetHub Backend — Snippet, Version & Diff Schemas
======================================================

What:  Request/response contracts for snippet CRUD, version history,
       rollback and diff endpoints.
How:   Request models normalize input (trimmed titles, de-duplicated tag
       names, blank source → null) so services receive clean values.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.snippet import DEFAULT_LANGUAGE


def _clean_tag_names(names: List[str]) -> List[str]:
    """Strip, drop empties and de-duplicate while keeping first-seen order."""
    seen = set()
    cleaned = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.add(name)
            cleaned.append(name)
    return cleaned


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SnippetCreate(BaseModel):
    """Body of POST /api/snippets."""
    title: str = Field(min_length=1, max_length=500, description="Snippet title")
    content: str = Field(min_length=1, description="The code itself")
    language: str = Field(
        default=DEFAULT_LANGUAGE,
        max_length=100,
        description=f"Language label for highlighting (default '{DEFAULT_LANGUAGE}')",
    )
    source: Optional[str] = Field(default=None, description="Where the snippet came from")
    tags: List[str] = Field(default_factory=list, description="Tag names; created on demand")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content is required")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        return v.strip() or DEFAULT_LANGUAGE

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return _clean_tag_names(v)


class SnippetUpdate(SnippetCreate):
    """
    Body of PUT /api/snippets/{id}.

    Same fields as create; `tags` left out (null) keeps the current links,
    an explicit list (even empty) replaces them.
    """
    tags: Optional[List[str]] = Field(default=None, description="Replacement tag names")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        return _clean_tag_names(v)


class RollbackRequest(BaseModel):
    """Body of POST /api/snippets/{id}/rollback."""
    version_number: int = Field(ge=1, description="Snapshot version to restore")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TagRef(BaseModel):
    """Tag as embedded in a snippet."""
    id: int
    name: str
    color: str

    model_config = {"from_attributes": True}


class SnippetResponse(BaseModel):
    """Full snippet with its resolved tags and favorite flag."""
    id: int
    title: str
    content: str
    language: str
    source: Optional[str] = None
    version: int = Field(description="Live revision number, starts at 1")
    created_at: datetime
    updated_at: datetime
    tags: List[TagRef] = Field(default_factory=list)
    is_favorite: bool = False


class FavoriteSnippetResponse(SnippetResponse):
    """Snippet in the favorites list, with the time it was favorited."""
    favorited_at: datetime


class VersionResponse(BaseModel):
    """One entry of a snippet's version history."""
    id: int
    snippet_id: int
    title: str
    content: str
    language: str
    source: Optional[str] = None
    version_number: int = Field(description="Live version this snapshot superseded")
    created_at: datetime

    model_config = {"from_attributes": True}


class DiffSide(BaseModel):
    """One side of a comparison, echoed so the client need not re-fetch."""
    title: str
    content: str
    version: int


class DiffResponse(BaseModel):
    """
    Result of GET /api/snippets/{id}/diff/{version}.

    `diff` is unified-diff text (snapshot → current); empty when equal.
    """
    current: DiffSide
    version: DiffSide
    diff: str
