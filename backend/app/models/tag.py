"""
SnippetHub Backend — Tag & Snippet↔Tag Link Models
====================================================

What:  `tags` (unique names with a display color) and the `snippet_tags`
       many-to-many association.
Who:   TagService (CRUD, resolve-or-create), SnippetService and
       TransferService (linking), AnalyticsService (usage counts).

A Tag has its own lifecycle: it is never removed implicitly, and TagService
refuses to delete one that is still linked to a snippet.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.snippet import utcnow

# Neutral gray used when a tag is created without a color.
DEFAULT_TAG_COLOR = "#6B7280"


class Tag(Base):
    """A named, colored label that can be attached to any number of snippets."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    color: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_TAG_COLOR,
        server_default=text(f"'{DEFAULT_TAG_COLOR}'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}', color='{self.color}')>"


class SnippetTag(Base):
    """Association row; unique per (snippet, tag), cascades from both sides."""

    __tablename__ = "snippet_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    snippet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("snippets.id", ondelete="CASCADE"),
        nullable=False,
    )

    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("snippet_id", "tag_id", name="uq_snippet_tags_pair"),
        Index("idx_snippet_tags_snippet_id", "snippet_id"),
        Index("idx_snippet_tags_tag_id", "tag_id"),
    )
