"""Create forms and form_submissions

Revision ID: 5d2f8a91c3e4
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5d2f8a91c3e4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

privacy_tier_enum = sa.Enum(
    "public",
    "creator_only",
    "restricted_emails",
    name="form_privacy_tier",
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "forms",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("creator_id", sa.VARCHAR(), nullable=False),
        sa.Column("title", sa.VARCHAR(), nullable=False),
        sa.Column("description", sa.VARCHAR(), nullable=False, server_default=""),
        sa.Column("fields", sa.JSON(), nullable=True),
        sa.Column("slug", sa.VARCHAR(), nullable=False),
        sa.Column(
            "privacy_tier",
            privacy_tier_enum,
            nullable=False,
            server_default="public",
        ),
        sa.Column("allowed_emails", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.BOOLEAN(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_forms_slug", "forms", ["slug"], unique=True)
    op.create_index("ix_forms_creator_id", "forms", ["creator_id"], unique=False)

    op.create_table(
        "form_submissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("form_id", sa.Uuid(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.VARCHAR(), nullable=False),
        sa.Column("user_agent", sa.VARCHAR(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_form_submissions_form_id", "form_submissions", ["form_id"], unique=False
    )
    op.create_index(
        "ix_form_submissions_submitted_at",
        "form_submissions",
        ["submitted_at"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_form_submissions_submitted_at", table_name="form_submissions")
    op.drop_index("ix_form_submissions_form_id", table_name="form_submissions")
    op.drop_table("form_submissions")
    op.drop_index("ix_forms_creator_id", table_name="forms")
    op.drop_index("ix_forms_slug", table_name="forms")
    op.drop_table("forms")
    privacy_tier_enum.drop(op.get_bind(), checkfirst=True)
