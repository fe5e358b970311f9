"""initial schema

Revision ID: 5f2c1a7e9b34
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "5f2c1a7e9b34"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("avatar_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "user_friends",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("friend_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_friends_user_id_users"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["friend_id"], ["users.id"], name=op.f("fk_user_friends_friend_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "friend_id", name=op.f("pk_user_friends")),
    )

    op.create_table(
        "user_blocks",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("blocked_user_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_blocks_user_id_users"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["blocked_user_id"], ["users.id"], name=op.f("fk_user_blocks_blocked_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "blocked_user_id", name=op.f("pk_user_blocks")),
    )

    op.create_table(
        "meditations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("difficulty", sa.String(), nullable=True),
        sa.Column("audio_url", sa.String(), nullable=True),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_meditations")),
    )
    op.create_index(op.f("ix_meditations_id"), "meditations", ["id"], unique=False)

    op.create_table(
        "group_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("host_id", sa.Integer(), nullable=False),
        sa.Column("meditation_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=True),
        sa.Column("allowed_participants", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("joined_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["host_id"], ["users.id"], name=op.f("fk_group_sessions_host_id_users")),
        sa.ForeignKeyConstraint(["meditation_id"], ["meditations.id"], name=op.f("fk_group_sessions_meditation_id_meditations")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_group_sessions")),
    )
    op.create_index(op.f("ix_group_sessions_id"), "group_sessions", ["id"], unique=False)
    op.create_index(op.f("ix_group_sessions_host_id"), "group_sessions", ["host_id"], unique=False)
    op.create_index(op.f("ix_group_sessions_scheduled_time"), "group_sessions", ["scheduled_time"], unique=False)
    op.create_index(op.f("ix_group_sessions_status"), "group_sessions", ["status"], unique=False)

    op.create_table(
        "meditation_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("meditation_id", sa.Integer(), nullable=True),
        sa.Column("group_session_id", sa.Integer(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("duration_completed", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("interruptions", sa.Integer(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=True),
        sa.Column("mood_before", sa.String(), nullable=True),
        sa.Column("mood_after", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_meditation_sessions_user_id_users")),
        sa.ForeignKeyConstraint(["meditation_id"], ["meditations.id"], name=op.f("fk_meditation_sessions_meditation_id_meditations")),
        sa.ForeignKeyConstraint(["group_session_id"], ["group_sessions.id"], name=op.f("fk_meditation_sessions_group_session_id_group_sessions")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_meditation_sessions")),
    )
    op.create_index(op.f("ix_meditation_sessions_id"), "meditation_sessions", ["id"], unique=False)
    op.create_index(op.f("ix_meditation_sessions_user_id"), "meditation_sessions", ["user_id"], unique=False)
    op.create_index(op.f("ix_meditation_sessions_status"), "meditation_sessions", ["status"], unique=False)
    op.create_index(
        "uq_meditation_sessions_active_user",
        "meditation_sessions",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "session_analytics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("meditation_id", sa.Integer(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("duration_completed", sa.Integer(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=True),
        sa.Column("mood_before", sa.String(), nullable=True),
        sa.Column("mood_after", sa.String(), nullable=True),
        sa.Column("interruptions", sa.Integer(), nullable=True),
        sa.Column("focus_score", sa.Float(), nullable=True),
        sa.Column("maintained_streak", sa.Boolean(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_session_analytics_user_id_users")),
        sa.ForeignKeyConstraint(["session_id"], ["meditation_sessions.id"], name=op.f("fk_session_analytics_session_id_meditation_sessions")),
        sa.ForeignKeyConstraint(["meditation_id"], ["meditations.id"], name=op.f("fk_session_analytics_meditation_id_meditations")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_session_analytics")),
        sa.UniqueConstraint("session_id", name=op.f("uq_session_analytics_session_id")),
    )
    op.create_index(op.f("ix_session_analytics_id"), "session_analytics", ["id"], unique=False)
    op.create_index(op.f("ix_session_analytics_user_id"), "session_analytics", ["user_id"], unique=False)

    op.create_table(
        "achievements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=True),
        sa.Column("target", sa.Integer(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_achievements_user_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_achievements")),
        sa.UniqueConstraint("user_id", "type", name=op.f("uq_achievements_user_id_type")),
    )
    op.create_index(op.f("ix_achievements_id"), "achievements", ["id"], unique=False)
    op.create_index(op.f("ix_achievements_user_id"), "achievements", ["user_id"], unique=False)

    op.create_table(
        "group_session_participants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_completed", sa.Integer(), nullable=True),
        sa.Column("mood_before", sa.String(), nullable=True),
        sa.Column("mood_after", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["session_id"], ["group_sessions.id"], name=op.f("fk_group_session_participants_session_id_group_sessions"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_group_session_participants_user_id_users")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_group_session_participants")),
        sa.UniqueConstraint("session_id", "user_id", name=op.f("uq_group_session_participants_session_id_user_id")),
    )
    op.create_index(op.f("ix_group_session_participants_id"), "group_session_participants", ["id"], unique=False)
    op.create_index(op.f("ix_group_session_participants_session_id"), "group_session_participants", ["session_id"], unique=False)

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["session_id"], ["group_sessions.id"], name=op.f("fk_chat_messages_session_id_group_sessions"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_chat_messages_user_id_users")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_chat_messages")),
    )
    op.create_index(op.f("ix_chat_messages_id"), "chat_messages", ["id"], unique=False)
    op.create_index(op.f("ix_chat_messages_session_id"), "chat_messages", ["session_id"], unique=False)
    op.create_index(op.f("ix_chat_messages_created_at"), "chat_messages", ["created_at"], unique=False)

    op.create_table(
        "friends",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("requester_id", sa.Integer(), nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["requester_id"], ["users.id"], name=op.f("fk_friends_requester_id_users"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"], name=op.f("fk_friends_recipient_id_users"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_friends")),
    )
    op.create_index(op.f("ix_friends_id"), "friends", ["id"], unique=False)
    op.create_index(op.f("ix_friends_requester_id"), "friends", ["requester_id"], unique=False)
    op.create_index(op.f("ix_friends_recipient_id"), "friends", ["recipient_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("friends")
    op.drop_table("chat_messages")
    op.drop_table("group_session_participants")
    op.drop_table("achievements")
    op.drop_table("session_analytics")
    op.drop_table("meditation_sessions")
    op.drop_table("group_sessions")
    op.drop_table("meditations")
    op.drop_table("user_blocks")
    op.drop_table("user_friends")
    op.drop_table("users")
