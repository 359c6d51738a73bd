"""
SnippetHub Backend — ORM Models
================================

Importing this package registers every table on `Base.metadata`
(used by `Database.create_all()` and Alembic autogenerate).
"""

from app.models.favorite import Favorite
from app.models.snippet import DEFAULT_LANGUAGE, Snippet, SnippetVersion
from app.models.tag import DEFAULT_TAG_COLOR, SnippetTag, Tag

__all__ = [
    "DEFAULT_LANGUAGE",
    "DEFAULT_TAG_COLOR",
    "Favorite",
    "Snippet",
    "SnippetTag",
    "SnippetVersion",
    "Tag",
]
