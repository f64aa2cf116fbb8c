"""Initial schema and seed data for Thinky

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

This is the initial migration that creates all tables of the Thinky service
and seeds the default community policies:
- Accounts and one-time tokens (users, email_verifications, password_resets)
- Study content (verified_schools, subjects, reviewers, reactions)
- Chat and presence (messages, online_users)
- Moderation (reports, policies)

Revision format: YYYYMMDD_HHMMSS_description

"""

import uuid
from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


DEFAULT_POLICIES = (
    ("Be respectful", "No harassment, hate speech or personal attacks.", "both"),
    ("No spam", "Do not post advertisements, repeated messages or unrelated links.", "both"),
    ("Original work", "Only publish reviewers you wrote or have the right to share.", "reviewer"),
    ("Accurate content", "Reviewers should be correct and on topic for their subject.", "reviewer"),
    ("Keep chat clean", "No offensive language; repeated violations lead to a mute.", "message"),
)


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="student"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("display_name", sa.String(128), nullable=True),
        sa.Column("profile_picture_url", sa.String(), nullable=True),
        sa.Column("is_dev", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("banned_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("blocked_from_creating_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("muted_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("chat_banned_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("chat_warnings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("warning_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("session_token", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_email", "email", unique=True),
        sa.Index("ix_users_username", "username", unique=True),
        sa.Index("ix_users_created_at", "created_at"),
    )

    # Create one-time token tables
    for table in ("email_verifications", "password_resets"):
        op.create_table(
            table,
            sa.Column("id", sa.String(36), nullable=False),
            sa.Column("email", sa.String(320), nullable=False),
            sa.Column("token", sa.String(128), nullable=False),
            sa.Column("user_id", sa.String(36), nullable=True),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.Index(f"ix_{table}_email", "email"),
            sa.Index(f"ix_{table}_token", "token", unique=True),
        )

    # Create verified_schools table
    op.create_table(
        "verified_schools",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_verified_schools_name", "name", unique=True),
    )

    # Create subjects table
    op.create_table(
        "subjects",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("description", sa.String(), nullable=False, server_default=""),
        sa.Column("school", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.Index("ix_subjects_user_id", "user_id"),
        sa.Index("ix_subjects_created_at", "created_at"),
    )

    # Create reviewers table
    op.create_table(
        "reviewers",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("subject_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("flashcards", sa.JSON(), nullable=True),
        sa.Column("hidden_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="CASCADE"),
        sa.Index("ix_reviewers_user_id", "user_id"),
        sa.Index("ix_reviewers_subject_id", "subject_id"),
        sa.Index("ix_reviewers_created_at", "created_at"),
    )

    # Create reactions table
    op.create_table(
        "reactions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("reviewer_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("reaction_type", sa.String(32), nullable=False, server_default="heart"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["reviewer_id"], ["reviewers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("reviewer_id", "user_id", "reaction_type", name="uq_reactions_reviewer_user_type"),
        sa.Index("ix_reactions_reviewer_id", "reviewer_id"),
        sa.Index("ix_reactions_user_id", "user_id"),
    )

    # Create messages table
    op.create_table(
        "messages",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("chat_type", sa.String(32), nullable=False, server_default="general"),
        sa.Column("recipient_id", sa.String(36), nullable=True),
        sa.Column("reply_to", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.Index("ix_messages_user_id", "user_id"),
        sa.Index("ix_messages_chat_type", "chat_type"),
        sa.Index("ix_messages_recipient_id", "recipient_id"),
        sa.Index("ix_messages_created_at", "created_at"),
    )

    # Create online_users table
    op.create_table(
        "online_users",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.Index("ix_online_users_last_seen", "last_seen"),
    )

    # Create reports table
    op.create_table(
        "reports",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(16), nullable=False, server_default="reviewer"),
        sa.Column("reviewer_id", sa.String(36), nullable=True),
        sa.Column("message_id", sa.String(36), nullable=True),
        sa.Column("reported_user_id", sa.String(36), nullable=True),
        sa.Column("reporter_id", sa.String(36), nullable=True),
        sa.Column("report_type", sa.String(64), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=True, server_default="open"),
        sa.Column("action_taken_by", sa.String(36), nullable=True),
        sa.Column("action_taken", sa.Text(), nullable=True),
        sa.Column("action_taken_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["reviewer_id"], ["reviewers.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["message_id"], ["messages.id"], ondelete="SET NULL"),
        sa.Index("ix_reports_reviewer_id", "reviewer_id"),
        sa.Index("ix_reports_message_id", "message_id"),
        sa.Index("ix_reports_reported_user_id", "reported_user_id"),
        sa.Index("ix_reports_reporter_id", "reporter_id"),
        sa.Index("ix_reports_status", "status"),
        sa.Index("ix_reports_created_at", "created_at"),
    )

    # Create policies table
    policies = op.create_table(
        "policies",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(16), nullable=False, server_default="both"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Seed default policies
    now = datetime.now(timezone.utc)
    op.bulk_insert(
        policies,
        [
            {
                "id": str(uuid.uuid4()),
                "title": title,
                "description": description,
                "category": category,
                "created_at": now,
                "updated_at": now,
            }
            for title, description, category in DEFAULT_POLICIES
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("policies")
    op.drop_table("reports")
    op.drop_table("online_users")
    op.drop_table("messages")
    op.drop_table("reactions")
    op.drop_table("reviewers")
    op.drop_table("subjects")
    op.drop_table("verified_schools")
    op.drop_table("password_resets")
    op.drop_table("email_verifications")
    op.drop_table("users")
