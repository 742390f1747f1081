"""create intake tables

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "3f2a9c1d7b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "wa_contacts",
        sa.Column("number", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("number"),
    )
    op.create_table(
        "form_steps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("step", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=10), nullable=True),
        sa.Column("instruction", sa.Text(), nullable=False),
        sa.Column("input_kind", sa.String(length=20), nullable=False),
        sa.Column("field_key", sa.String(length=50), nullable=False),
        sa.Column("is_terminal", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_form_steps_step"), "form_steps", ["step"], unique=False)
    op.create_index(op.f("ix_form_steps_category"), "form_steps", ["category"], unique=False)
    op.create_table(
        "faq",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("keyword", sa.String(length=50), nullable=False),
        sa.Column("subkey", sa.String(length=20), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_faq_keyword"), "faq", ["keyword"], unique=False)
    op.create_table(
        "intake_records",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("birthdate", sa.String(length=10), nullable=False),
        sa.Column("category", sa.String(length=10), nullable=True),
        sa.Column("family_id", sa.String(length=16), nullable=False),
        sa.Column("documents", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_intake_records_user_id"), "intake_records", ["user_id"], unique=False)
    op.create_table(
        "quota",
        sa.Column("category", sa.String(length=10), nullable=False),
        sa.Column("remaining", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("category"),
    )


def downgrade() -> None:
    op.drop_table("quota")
    op.drop_index(op.f("ix_intake_records_user_id"), table_name="intake_records")
    op.drop_table("intake_records")
    op.drop_index(op.f("ix_faq_keyword"), table_name="faq")
    op.drop_table("faq")
    op.drop_index(op.f("ix_form_steps_category"), table_name="form_steps")
    op.drop_index(op.f("ix_form_steps_step"), table_name="form_steps")
    op.drop_table("form_steps")
    op.drop_table("wa_contacts")
