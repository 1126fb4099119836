"""create assignment attachments

Revision ID: 3b7d9e1f0c25
Revises: 8f41d2c6a7e3
Create Date: 2026-10-16 14:02:11.380417

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7d9e1f0c25'
down_revision: Union[str, Sequence[str], None] = '8f41d2c6a7e3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "assignment_attachments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "assignment_id",
            sa.Integer(),
            sa.ForeignKey("assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("stored_name", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("path", sa.String(1024), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("media_type", sa.String(255), nullable=False),
    )
    op.create_index("ix_assignment_attachments_id", "assignment_attachments", ["id"])
    op.create_index("ix_assignment_attachments_assignment_id", "assignment_attachments", ["assignment_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("assignment_attachments")
