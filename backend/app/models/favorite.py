"""
SnippetHub Backend — Favorite Marker Model
============================================

What:  Optional one-to-one marker keyed by snippet id.
Who:   FavoriteService only. Other services ask FavoriteService for the
       boolean instead of querying this table themselves.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.snippet import utcnow


class Favorite(Base):
    """Existence of a row means the snippet is a favorite; at most one per snippet."""

    __tablename__ = "favorites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    snippet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("snippets.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # When the snippet was favorited (drives the favorites list order).
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Favorite(snippet_id={self.snippet_id})>"
