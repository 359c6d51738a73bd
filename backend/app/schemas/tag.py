"""
SnippetHub Backend — Tag & Favorite Schemas
=============================================
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# #RGB or #RRGGBB, leading '#' optional on input.
_HEX_COLOR = re.compile(r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class TagCreate(BaseModel):
    """Body of POST /api/tags and PUT /api/tags/{id}."""
    name: str = Field(min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, description="Hex color, e.g. #3B82F6")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Tag name is required")
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not _HEX_COLOR.match(v):
            raise ValueError("Color must be a valid hex color")
        return v if v.startswith("#") else f"#{v}"


class TagUpdate(TagCreate):
    """Omitted color keeps the tag's current color."""


class TagResponse(BaseModel):
    id: int
    name: str
    color: str
    created_at: datetime
    usage_count: int = Field(default=0, description="Number of snippets linked to this tag")

    model_config = {"from_attributes": True}


class FavoriteStatus(BaseModel):
    """Returned by the favorite add/remove/toggle endpoints."""
    message: str
    snippet_id: int
    is_favorite: bool
