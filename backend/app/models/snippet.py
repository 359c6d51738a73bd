"""
SnippetHub Backend — Snippet & Version Snapshot Models
========================================================

What:  ORM models for the `snippets` table and its `versions` history table.
How:   SQLAlchemy 2.0 declarative mapping; Alembic migration 001 mirrors it.
Who:   SnippetService, VersionService, TransferService, AnalyticsService.

Ownership:
    A Snippet owns its version snapshots, tag links and favorite marker.
    All three reference `snippets.id` with ON DELETE CASCADE, so deleting a
    snippet removes them in the same statement. No ORM relationships are
    mapped: every association is loaded by an explicit query, which keeps
    async sessions free of implicit lazy loads.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# Placeholder language for snippets created or imported without one.
DEFAULT_LANGUAGE = "plaintext"


def utcnow() -> datetime:
    """Timezone-aware current time; every timestamp is stored in UTC."""
    return datetime.now(timezone.utc)


class Snippet(Base):
    """
    A stored code fragment.

    Invariant:
        `version` starts at 1 and grows by exactly 1 each time the title or
        content changes (see VersionService.apply_update). Metadata-only
        edits (language, source) leave it untouched.
    """

    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    language: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default=DEFAULT_LANGUAGE,
        server_default=text(f"'{DEFAULT_LANGUAGE}'"),
    )

    # Free text: a URL, a book, a colleague's name.
    source: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default=text("1"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_snippets_language", "language"),
        Index("idx_snippets_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title='{self.title}', version={self.version})>"


class SnippetVersion(Base):
    """
    Immutable snapshot of a snippet's editable fields before an update.

    `version_number` is the live version that this snapshot superseded, so
    the first edit of a fresh snippet produces snapshot 1 and live version 2.
    Rows are only ever inserted; they disappear with their snippet.
    """

    __tablename__ = "versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    snippet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("snippets.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(String(100), nullable=False)
    source: Mapped[str | None] = mapped_column(Text, nullable=True)

    version_number: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_versions_snippet_id", "snippet_id"),
        UniqueConstraint("snippet_id", "version_number", name="uq_versions_snippet_version"),
    )

    def __repr__(self) -> str:
        return f"<SnippetVersion(snippet_id={self.snippet_id}, version_number={self.version_number})>"
