"""Create CareerFlow tables

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_type = postgresql.JSONB().with_variant(sa.JSON(), "sqlite")

HISTORY_TABLES = (
    "linkedin_posts",
    "resume_analyses",
    "skill_gap_roadmaps",
    "mock_interviews",
    "stored_resumes",
)


def _history_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    ]


def _history_indexes(table: str) -> None:
    op.create_index(op.f(f"ix_{table}_user_id"), table, ["user_id"], unique=False)
    op.create_index(op.f(f"ix_{table}_created_at"), table, ["created_at"], unique=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("attributes", json_type, nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "user_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("llm_endpoint", sa.String(), nullable=True),
        sa.Column("llm_model_name", sa.String(), nullable=True),
        sa.Column("encrypted_api_key", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )
    op.create_index(op.f("ix_user_settings_id"), "user_settings", ["id"], unique=False)

    op.create_table(
        "linkedin_posts",
        *_history_columns(),
        sa.Column("post", sa.Text(), nullable=False),
        sa.Column("tone", sa.String(length=32), nullable=False),
        sa.Column("project_details", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "resume_analyses",
        *_history_columns(),
        sa.Column("overall_score", sa.Float(), nullable=False),
        sa.Column("student_project_portfolio_score", sa.Float(), nullable=False),
        sa.Column("technical_knowledge_score", sa.Float(), nullable=False),
        sa.Column("keyword_score", sa.Float(), nullable=False),
        sa.Column("keyword_matches", json_type, nullable=False),
        sa.Column("keyword_gaps", json_type, nullable=False),
        sa.Column("suggestions", sa.Text(), nullable=False),
        sa.Column("job_description", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "skill_gap_roadmaps",
        *_history_columns(),
        sa.Column("target_role", sa.String(length=255), nullable=False),
        sa.Column("job_description", sa.Text(), nullable=False),
        sa.Column("roadmap", sa.Text(), nullable=False),
        sa.Column("sections", json_type, nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "mock_interviews",
        *_history_columns(),
        sa.Column("session_id", sa.String(length=36), nullable=False),
        sa.Column("job_description", sa.Text(), nullable=False),
        sa.Column("transcript", sa.Text(), nullable=False),
        sa.Column("final_score", sa.Float(), nullable=False),
        sa.Column("final_feedback", sa.Text(), nullable=False),
        sa.Column("question_count", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_mock_interviews_session_id"),
        "mock_interviews",
        ["session_id"],
        unique=True,
    )

    op.create_table(
        "stored_resumes",
        *_history_columns(),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("mime_type", sa.String(length=128), nullable=False),
        sa.Column("data_uri", sa.Text(), nullable=False),
        sa.Column("text_content", sa.Text(), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    for table in HISTORY_TABLES:
        _history_indexes(table)

    op.create_table(
        "interview_sessions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("not_started", "in_progress", "completed", name="interviewstatus"),
            nullable=False,
        ),
        sa.Column("channel", sa.Enum("text", "voice", name="interviewchannel"), nullable=False),
        sa.Column("job_description", sa.Text(), nullable=False),
        sa.Column("resume_text", sa.Text(), nullable=True),
        sa.Column("question_count", sa.Integer(), nullable=False),
        sa.Column("conversation_summary", sa.Text(), nullable=False),
        sa.Column("current_question", sa.Text(), nullable=False),
        sa.Column("is_over", sa.Boolean(), nullable=False),
        sa.Column("last_score", sa.Float(), nullable=True),
        sa.Column("last_feedback", sa.Text(), nullable=True),
        sa.Column("messages", json_type, nullable=False),
        sa.Column("record_id", sa.String(length=36), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_interview_sessions_user_id"),
        "interview_sessions",
        ["user_id"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_interview_sessions_user_id"), table_name="interview_sessions")
    op.drop_table("interview_sessions")
    sa.Enum(name="interviewchannel").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="interviewstatus").drop(op.get_bind(), checkfirst=True)

    for table in reversed(HISTORY_TABLES):
        op.drop_index(op.f(f"ix_{table}_created_at"), table_name=table)
        op.drop_index(op.f(f"ix_{table}_user_id"), table_name=table)
    op.drop_index(op.f("ix_mock_interviews_session_id"), table_name="mock_interviews")
    for table in reversed(HISTORY_TABLES):
        op.drop_table(table)

    op.drop_index(op.f("ix_user_settings_id"), table_name="user_settings")
    op.drop_table("user_settings")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
