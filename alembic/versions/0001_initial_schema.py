"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration creates:
1. submissions - applications awaiting review
2. time_slots - bookable interview slots, unique per date and time
3. appointments - interviews, matched to submissions by phone only
4. interview_evaluations - one rating per judge, criterion and appointment
5. students - accounts, at most one per accepted appointment

Status and decision columns are plain strings; legacy rows use mixed case.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        # Applicant
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=False),
        sa.Column("church", sa.String(length=200), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("telegram_username", sa.String(length=100), nullable=True),
        # Audition recording
        sa.Column("audio_file_path", sa.String(length=500), nullable=True),
        sa.Column("audio_file_size", sa.BigInteger(), nullable=True),
        sa.Column("audio_duration", sa.Float(), nullable=True),
        # Review
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("reviewer_comments", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(length=100), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("submitted_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_submissions_status", "submissions", ["status"])
    op.create_index("ix_submissions_submitted_at", "submissions", ["submitted_at"])

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("time", sa.String(length=5), nullable=False),
        sa.Column("label", sa.String(length=20), nullable=False),
        sa.Column("period", sa.String(length=20), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("available", sa.Boolean(), nullable=False, server_default="true"),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", "time", name="uq_time_slots_date_time"),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        # Applicant
        sa.Column("applicant_name", sa.String(length=200), nullable=False),
        sa.Column("applicant_email", sa.String(length=255), nullable=True),
        sa.Column("applicant_phone", sa.String(length=30), nullable=False),
        # Slot
        sa.Column("scheduled_date", sa.String(length=10), nullable=False),
        sa.Column("scheduled_time", sa.String(length=5), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="scheduled"),
        # Audition details
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("selected_song", sa.String(length=200), nullable=True),
        sa.Column("additional_song", sa.String(length=200), nullable=True),
        sa.Column("additional_song_singer", sa.String(length=200), nullable=True),
        # Coordinator checks
        sa.Column(
            "coordinator_verified", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("coordinator_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "coordinator_approved", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("coordinator_approved_at", sa.DateTime(timezone=True), nullable=True),
        # Outcome
        sa.Column("final_decision", sa.String(length=20), nullable=True),
        sa.Column("decision_made_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index(
        "ix_appointments_schedule", "appointments", ["scheduled_date", "scheduled_time"]
    )

    op.create_table(
        "interview_evaluations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("appointment_id", sa.Integer(), nullable=False),
        sa.Column("judge_name", sa.String(length=100), nullable=False),
        sa.Column("criteria_name", sa.String(length=100), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "appointment_id",
            "judge_name",
            "criteria_name",
            name="uq_interview_evaluations_appointment_judge_criteria",
        ),
        sa.CheckConstraint("rating BETWEEN 0 AND 5", name="ck_interview_evaluations_rating"),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        # Credentials
        sa.Column("username", sa.String(length=30), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        # Profile
        sa.Column("full_name_amharic", sa.String(length=100), nullable=False),
        sa.Column("full_name_english", sa.String(length=100), nullable=False),
        sa.Column("gender", sa.String(length=10), nullable=False),
        sa.Column("local_church", sa.String(length=200), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=False),
        sa.Column("profile_complete", sa.Boolean(), nullable=False, server_default="false"),
        # Qualifying interview
        sa.Column("appointment_id", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("username", name="uq_students_username"),
        sa.UniqueConstraint("phone", name="uq_students_phone"),
        # An accepted appointment backs at most one account
        sa.UniqueConstraint("appointment_id", name="uq_students_appointment_id"),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("students")
    op.drop_table("interview_evaluations")
    op.drop_index("ix_appointments_schedule", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("time_slots")
    op.drop_index("ix_submissions_submitted_at", table_name="submissions")
    op.drop_index("ix_submissions_status", table_name="submissions")
    op.drop_table("submissions")
