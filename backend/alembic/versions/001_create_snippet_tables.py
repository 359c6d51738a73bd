"""Create snippet tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates snippets, versions, tags, snippet_tags and favorites with
       their indexes. Mirrors app/models/.

Rollback: downgrade() drops every table (destructive; all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "snippets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("language", sa.String(100), nullable=False, server_default=sa.text("'plaintext'")),
        sa.Column("source", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("idx_snippets_language", "snippets", ["language"])
    op.create_index("idx_snippets_created_at", "snippets", ["created_at"])

    op.create_table(
        "versions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "snippet_id",
            sa.Integer(),
            sa.ForeignKey("snippets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("language", sa.String(100), nullable=False),
        sa.Column("source", sa.Text(), nullable=True),
        # The live version this snapshot superseded.
        sa.Column("version_number", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("snippet_id", "version_number", name="uq_versions_snippet_version"),
    )
    op.create_index("idx_versions_snippet_id", "versions", ["snippet_id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("color", sa.String(20), nullable=False, server_default=sa.text("'#6B7280'")),
        _timestamp("created_at"),
    )

    op.create_table(
        "snippet_tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "snippet_id",
            sa.Integer(),
            sa.ForeignKey("snippets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "tag_id",
            sa.Integer(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.UniqueConstraint("snippet_id", "tag_id", name="uq_snippet_tags_pair"),
    )
    op.create_index("idx_snippet_tags_snippet_id", "snippet_tags", ["snippet_id"])
    op.create_index("idx_snippet_tags_tag_id", "snippet_tags", ["tag_id"])

    op.create_table(
        "favorites",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "snippet_id",
            sa.Integer(),
            sa.ForeignKey("snippets.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        _timestamp("created_at"),
    )


def downgrade() -> None:
    op.drop_table("favorites")
    op.drop_index("idx_snippet_tags_tag_id", table_name="snippet_tags")
    op.drop_index("idx_snippet_tags_snippet_id", table_name="snippet_tags")
    op.drop_table("snippet_tags")
    op.drop_table("tags")
    op.drop_index("idx_versions_snippet_id", table_name="versions")
    op.drop_table("versions")
    op.drop_index("idx_snippets_created_at", table_name="snippets")
    op.drop_index("idx_snippets_language", table_name="snippets")
    op.drop_table("snippets")
