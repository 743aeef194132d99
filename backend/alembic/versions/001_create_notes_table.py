"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2025-01-15 00:00:00.000000+00:00

What:  Creates the `notes` table: user-owned free-text notes.
How:   Portable column types; ids are caller-supplied strings, so there is
       no server-side id generation.

Rollback: downgrade() drops the table (all notes are lost).
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
    op.create_table(
        "notes",
        sa.Column(
            "id",
            sa.String(255),
            nullable=False,
            comment="Caller-supplied unique identifier",
        ),
        sa.Column(
            "author_id",
            sa.String(255),
            nullable=False,
            comment="Identity-provider id of the owning user",
        ),
        sa.Column(
            "text",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Full note body",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was last edited (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Serves "this user's notes, newest first"
    op.create_index(
        "idx_notes_author_created_at",
        "notes",
        ["author_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_author_created_at", table_name="notes")
    op.drop_table("notes")
