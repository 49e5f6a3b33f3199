"""Initial schema: leads, dedup, audit and attendance tables.

Revision ID: 0001_initial
Revises:
Create Date: 2026-09-28 10:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

OPEN_SESSION_PREDICATE = sa.text("status = 'open'")
OPEN_BREAK_PREDICATE = sa.text("ended_at IS NULL")


def upgrade() -> None:
    op.create_table(
        "lead",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_name", sa.String(), nullable=False),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("merged_into", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_lead"),
    )
    op.create_index("ix_lead_created_at", "lead", ["created_at", "id"])
    op.create_index("ix_lead_merged_into", "lead", ["merged_into"])

    op.create_table(
        "lead_outcome",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("lead_id", sa.Uuid(), nullable=False),
        sa.Column("outcome", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["lead_id"], ["lead.id"], name="fk_lead_outcome_lead_id_lead"),
        sa.PrimaryKeyConstraint("id", name="pk_lead_outcome"),
    )
    op.create_index("ix_lead_outcome_lead_id", "lead_outcome", ["lead_id"])

    op.create_table(
        "duplicate_candidate",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("primary_id", sa.Uuid(), nullable=False),
        sa.Column("duplicate_id", sa.Uuid(), nullable=False),
        sa.Column("match_type", sa.String(length=32), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("reason", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_duplicate_candidate"),
        sa.UniqueConstraint(
            "entity_type",
            "primary_id",
            "duplicate_id",
            "match_type",
            name="uq_duplicate_candidate_pair",
        ),
    )
    op.create_index(
        "ix_duplicate_candidate_status",
        "duplicate_candidate",
        ["entity_type", "status"],
    )
    op.create_index(
        "ix_duplicate_candidate_duplicate_id",
        "duplicate_candidate",
        ["duplicate_id"],
    )

    op.create_table(
        "lead_merge",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("survivor_id", sa.Uuid(), nullable=False),
        sa.Column("merged_id", sa.Uuid(), nullable=False),
        sa.Column("merged_by", sa.String(), nullable=True),
        sa.Column("strategy", sa.JSON(), nullable=False),
        sa.Column("moved_outcome_ids", sa.JSON(), nullable=False),
        sa.Column("moved_activity_ids", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("undo_until", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_undone", sa.Boolean(), nullable=False),
        sa.Column("undone_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["survivor_id"], ["lead.id"], name="fk_lead_merge_survivor_id_lead"
        ),
        sa.ForeignKeyConstraint(["merged_id"], ["lead.id"], name="fk_lead_merge_merged_id_lead"),
        sa.PrimaryKeyConstraint("id", name="pk_lead_merge"),
    )
    op.create_index("ix_lead_merge_merged_id", "lead_merge", ["merged_id"])

    op.create_table(
        "lead_redirect",
        sa.Column("merged_id", sa.Uuid(), nullable=False),
        sa.Column("survivor_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["merged_id"], ["lead.id"], name="fk_lead_redirect_merged_id_lead"
        ),
        sa.ForeignKeyConstraint(
            ["survivor_id"], ["lead.id"], name="fk_lead_redirect_survivor_id_lead"
        ),
        sa.PrimaryKeyConstraint("merged_id", name="pk_lead_redirect"),
    )

    op.create_table(
        "activity_event",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_activity_event"),
    )
    op.create_index("ix_activity_event_entity", "activity_event", ["entity_type", "entity_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("before_data", sa.JSON(), nullable=True),
        sa.Column("after_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_audit_log"),
    )
    op.create_index("ix_audit_log_entity", "audit_log", ["entity_type", "entity_id"])

    op.create_table(
        "attendance_session",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("clock_in_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("clock_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_attendance_session"),
    )
    op.create_index(
        "ix_attendance_session_user_day",
        "attendance_session",
        ["user_id", "session_date"],
    )
    op.create_index(
        "uq_attendance_session_one_open_per_user",
        "attendance_session",
        ["user_id"],
        unique=True,
        sqlite_where=OPEN_SESSION_PREDICATE,
        postgresql_where=OPEN_SESSION_PREDICATE,
    )

    op.create_table(
        "attendance_break",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("session_id", sa.Uuid(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["session_id"],
            ["attendance_session.id"],
            name="fk_attendance_break_session_id_attendance_session",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_attendance_break"),
    )
    op.create_index(
        "uq_attendance_break_one_open_per_session",
        "attendance_break",
        ["session_id"],
        unique=True,
        sqlite_where=OPEN_BREAK_PREDICATE,
        postgresql_where=OPEN_BREAK_PREDICATE,
    )

    op.create_table(
        "daily_summary",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("gross_minutes", sa.Integer(), nullable=False),
        sa.Column("break_minutes", sa.Integer(), nullable=False),
        sa.Column("net_minutes", sa.Integer(), nullable=False),
        sa.Column("sessions_count", sa.Integer(), nullable=False),
        sa.Column("is_complete", sa.Boolean(), nullable=False),
        sa.Column("flags", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "day", name="pk_daily_summary"),
    )
    op.create_index("ix_daily_summary_day", "daily_summary", ["day"])


def downgrade() -> None:
    op.drop_index("ix_daily_summary_day", table_name="daily_summary")
    op.drop_table("daily_summary")
    op.drop_index("uq_attendance_break_one_open_per_session", table_name="attendance_break")
    op.drop_table("attendance_break")
    op.drop_index("uq_attendance_session_one_open_per_user", table_name="attendance_session")
    op.drop_index("ix_attendance_session_user_day", table_name="attendance_session")
    op.drop_table("attendance_session")
    op.drop_index("ix_audit_log_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_activity_event_entity", table_name="activity_event")
    op.drop_table("activity_event")
    op.drop_table("lead_redirect")
    op.drop_index("ix_lead_merge_merged_id", table_name="lead_merge")
    op.drop_table("lead_merge")
    op.drop_index("ix_duplicate_candidate_duplicate_id", table_name="duplicate_candidate")
    op.drop_index("ix_duplicate_candidate_status", table_name="duplicate_candidate")
    op.drop_table("duplicate_candidate")
    op.drop_index("ix_lead_outcome_lead_id", table_name="lead_outcome")
    op.drop_table("lead_outcome")
    op.drop_index("ix_lead_merged_into", table_name="lead")
    op.drop_index("ix_lead_created_at", table_name="lead")
    op.drop_table("lead")
