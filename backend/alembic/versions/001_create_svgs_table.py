"""Create svgs table

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates the `svgs` table holding uploaded SVG records.
How:   UUID primary key generated by the application, TEXT content,
       TIMESTAMP WITH TIME ZONE audit columns, index on created_at DESC.

Rollback: downgrade() drops the table entirely (destructive: all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the svgs table with all columns, constraints, and indexes."""
    op.create_table(
        "svgs",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=True),
            nullable=False,
            comment="Unique identifier, assigned at creation",
        ),
        sa.Column(
            "name",
            sa.Text(),
            nullable=False,
            comment="Display name (trimmed, non-empty)",
        ),
        sa.Column(
            "description",
            sa.Text(),
            nullable=False,
            comment="Free-text description (trimmed, non-empty)",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="SVG markup exactly as uploaded",
        ),
        sa.Column(
            "file_size",
            sa.Integer(),
            nullable=False,
            comment="Size of the original upload in bytes",
        ),
        sa.Column(
            "original_name",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Filename at upload time",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When this record was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When name/description last changed (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_svgs_created_at",
        "svgs",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop the svgs table. Destructive: every stored SVG is lost."""
    op.drop_index("idx_svgs_created_at", table_name="svgs")
    op.drop_table("svgs")
