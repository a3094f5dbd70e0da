"""Add structured messages to mock interview records

Revision ID: 8b41d6e2c9a3
Revises: 3f2a9c1d7b10
Create Date: 2026-10-19 15:40:02.117845

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "8b41d6e2c9a3"
down_revision: Union[str, Sequence[str], None] = "3f2a9c1d7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column(
        "mock_interviews",
        sa.Column(
            "messages",
            postgresql.JSONB().with_variant(sa.JSON(), "sqlite"),
            nullable=True,
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column("mock_interviews", "messages")
