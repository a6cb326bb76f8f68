"""Initial schema: accounts, booth configuration, captures and analytics.

Revision ID: 001
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("username", sa.String(191), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "CUSTOMER", name="user_role"),
            nullable=False,
            server_default="CUSTOMER",
        ),
        sa.Column("organization_name", sa.String(255), nullable=True),
        sa.Column("media_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("emails_sent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("username", name=op.f("uq_users_username")),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    # Settings
    op.create_table(
        "settings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("event_name", sa.String(255), nullable=False),
        sa.Column("admin_email", sa.String(255), nullable=False),
        sa.Column("countdown_time", sa.Integer(), nullable=False),
        sa.Column("reset_time", sa.Integer(), nullable=False),
        sa.Column("email_subject", sa.String(255), nullable=False),
        sa.Column("email_template", sa.Text(), nullable=False),
        sa.Column("smtp_host", sa.String(255), nullable=False),
        sa.Column("smtp_port", sa.Integer(), nullable=False),
        sa.Column("smtp_user", sa.String(255), nullable=False),
        sa.Column("smtp_password", sa.Text(), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("company_logo", sa.Text(), nullable=True),
        sa.Column("theme", sa.String(50), nullable=False),
        sa.Column("primary_color", sa.String(16), nullable=False),
        sa.Column("secondary_color", sa.String(16), nullable=False),
        sa.Column("background_color", sa.String(16), nullable=True),
        sa.Column("border_color", sa.String(16), nullable=True),
        sa.Column("button_color", sa.String(16), nullable=True),
        sa.Column("text_color", sa.String(16), nullable=True),
        sa.Column("custom_journey_enabled", sa.Boolean(), nullable=False),
        sa.Column("journey_name", sa.String(255), nullable=True),
        sa.Column("journey_config", JSONType, nullable=True),
        sa.Column("active_journey_id", sa.String(191), nullable=True),
        sa.Column("splash_page_enabled", sa.Boolean(), nullable=False),
        sa.Column("splash_page_title", sa.String(255), nullable=True),
        sa.Column("splash_page_content", sa.Text(), nullable=True),
        sa.Column("splash_page_image", sa.Text(), nullable=True),
        sa.Column("splash_page_button_text", sa.String(255), nullable=True),
        sa.Column("capture_mode", sa.String(20), nullable=False),
        sa.Column("photo_orientation", sa.String(50), nullable=False),
        sa.Column("photo_device", sa.String(50), nullable=False),
        sa.Column("photo_resolution", sa.String(50), nullable=False),
        sa.Column("photo_effect", sa.String(50), nullable=False),
        sa.Column("printer_enabled", sa.Boolean(), nullable=False),
        sa.Column("ai_image_correction", sa.Boolean(), nullable=False),
        sa.Column("video_orientation", sa.String(50), nullable=False),
        sa.Column("video_device", sa.String(50), nullable=False),
        sa.Column("video_resolution", sa.String(50), nullable=False),
        sa.Column("video_effect", sa.String(50), nullable=False),
        sa.Column("video_duration", sa.Integer(), nullable=False),
        sa.Column("filters_enabled", sa.Boolean(), nullable=False),
        sa.Column("enabled_filters", sa.Text(), nullable=True),
        sa.Column("storage_provider", sa.String(20), nullable=False),
        sa.Column("blob_vercel_enabled", sa.Boolean(), nullable=False),
        sa.Column("local_upload_path", sa.String(255), nullable=False),
        sa.Column("storage_base_url", sa.String(255), nullable=True),
        sa.Column("show_booth_boss_logo", sa.Boolean(), nullable=False),
        sa.Column("custom_css", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_settings_user_id_users"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_settings")),
    )
    op.create_index(op.f("ix_settings_user_id"), "settings", ["user_id"])
    op.create_index(op.f("ix_settings_is_default"), "settings", ["is_default"])

    # Event URLs
    op.create_table(
        "event_urls",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("url_path", sa.String(191), nullable=False),
        sa.Column("event_name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("event_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("event_end_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_event_urls_user_id_users"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_event_urls")),
    )
    op.create_index(op.f("ix_event_urls_user_id"), "event_urls", ["user_id"])
    op.create_index(op.f("ix_event_urls_url_path"), "event_urls", ["url_path"], unique=True)

    # Event URL <-> settings links
    op.create_table(
        "event_url_settings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_url_id", sa.Uuid(), nullable=False),
        sa.Column("settings_id", sa.Uuid(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["event_url_id"],
            ["event_urls.id"],
            name=op.f("fk_event_url_settings_event_url_id_event_urls"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["settings_id"],
            ["settings.id"],
            name=op.f("fk_event_url_settings_settings_id_settings"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_event_url_settings")),
    )
    op.create_index(
        op.f("ix_event_url_settings_event_url_id"), "event_url_settings", ["event_url_id"]
    )
    op.create_index(
        op.f("ix_event_url_settings_settings_id"), "event_url_settings", ["settings_id"]
    )

    # Journeys
    op.create_table(
        "journeys",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("pages", JSONType, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_journeys_user_id_users"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_journeys")),
    )
    op.create_index(op.f("ix_journeys_user_id"), "journeys", ["user_id"])

    # Booth sessions
    op.create_table(
        "booth_sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("event_url_id", sa.Uuid(), nullable=True),
        sa.Column("event_url_path", sa.String(191), nullable=True),
        sa.Column("event_name", sa.String(255), nullable=True),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("photo_path", sa.Text(), nullable=False),
        sa.Column("media_type", sa.String(20), nullable=False, server_default="photo"),
        sa.Column("filter", sa.String(50), nullable=True),
        sa.Column("template_used", sa.String(255), nullable=True),
        sa.Column("email_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_booth_sessions_user_id_users"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["event_url_id"],
            ["event_urls.id"],
            name=op.f("fk_booth_sessions_event_url_id_event_urls"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_booth_sessions")),
    )
    op.create_index(op.f("ix_booth_sessions_user_id"), "booth_sessions", ["user_id"])
    op.create_index(op.f("ix_booth_sessions_event_url_id"), "booth_sessions", ["event_url_id"])

    # Funnel analytics
    op.create_table(
        "booth_analytics",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("session_id", sa.String(191), nullable=False),
        sa.Column("booth_session_id", sa.Uuid(), nullable=True),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("email_domain", sa.String(191), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("event_url", sa.String(191), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_booth_analytics")),
        sa.UniqueConstraint("session_id", name=op.f("uq_booth_analytics_session_id")),
    )
    op.create_index(op.f("ix_booth_analytics_event_type"), "booth_analytics", ["event_type"])
    op.create_index(op.f("ix_booth_analytics_timestamp"), "booth_analytics", ["timestamp"])
    op.create_index(op.f("ix_booth_analytics_user_id"), "booth_analytics", ["user_id"])

    op.create_table(
        "booth_event_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("analytics_id", sa.Uuid(), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("metadata", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["analytics_id"],
            ["booth_analytics.id"],
            name=op.f("fk_booth_event_logs_analytics_id_booth_analytics"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_booth_event_logs")),
    )
    op.create_index(
        op.f("ix_booth_event_logs_analytics_id"), "booth_event_logs", ["analytics_id"]
    )
    op.create_index(op.f("ix_booth_event_logs_timestamp"), "booth_event_logs", ["timestamp"])


def downgrade() -> None:
    op.drop_table("booth_event_logs")
    op.drop_table("booth_analytics")
    op.drop_table("booth_sessions")
    op.drop_table("journeys")
    op.drop_table("event_url_settings")
    op.drop_table("event_urls")
    op.drop_table("settings")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS user_role")
