"""Initial schema: users, quotes, tags, favorites, view history, activity log

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Tables:
- users (Firebase Auth sync)
- quotes + quote_tags
- user_favorites (insertion-ordered bookmarks)
- quote_views (recent-view history, capped per user by the API)
- user_activities (append-only audit log; user_id is not a foreign key)
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    # ── users ──
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("firebase_uid", sa.String(128), unique=True, nullable=False, index=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("display_name", sa.String(255)),
        sa.Column("role", sa.String(20), nullable=False, server_default="user", index=True),
        sa.Column(
            "preferences",
            JSONB(),
            nullable=False,
            server_default=sa.text("""'{"theme": "light", "email_notifications": true}'::jsonb"""),
        ),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP"), index=True),
        *_timestamps(),
    )

    # ── quotes ──
    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("text", sa.String(500), nullable=False),
        sa.Column("author", sa.String(100), nullable=False, index=True),
        sa.Column("source", sa.String(200)),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("views >= 0", name="ck_quotes_views_non_negative"),
    )
    op.create_index("ix_quotes_created_at", "quotes", ["created_at"])

    op.create_table(
        "quote_tags",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("quote_id", sa.Integer(), sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("tag", sa.String(50), nullable=False, index=True),
        sa.UniqueConstraint("quote_id", "tag", name="uq_quote_tags_quote_tag"),
    )

    # ── favorites / view history ──
    op.create_table(
        "user_favorites",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("quote_id", sa.Integer(), sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "quote_id", name="uq_user_favorites_user_quote"),
    )

    op.create_table(
        "quote_views",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("quote_id", sa.Integer(), sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    # ── activity log ──
    op.create_table(
        "user_activities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False, index=True),
        sa.Column("action", sa.String(32), nullable=False, index=True),
        sa.Column("details", JSONB(), nullable=False, server_default="{}"),
        sa.Column("ip", sa.String(64)),
        sa.Column("user_agent", sa.String(512)),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP"), index=True),
    )
    op.create_index("ix_user_activities_user_timestamp", "user_activities", ["user_id", "timestamp"])


def downgrade() -> None:
    op.drop_index("ix_user_activities_user_timestamp", table_name="user_activities")
    op.drop_table("user_activities")
    op.drop_table("quote_views")
    op.drop_table("user_favorites")
    op.drop_table("quote_tags")
    op.drop_index("ix_quotes_created_at", table_name="quotes")
    op.drop_table("quotes")
    op.drop_table("users")
