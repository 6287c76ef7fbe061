"""transaction approval columns

Revision ID: 0002_transaction_approval
Revises: 0001_baseline_schema
Create Date: 2026-10-18 00:00:00.000000

"""

from __future__ import annotations

from alembic import op


revision = "0002_transaction_approval"
down_revision = "0001_baseline_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ALTER TYPE ... ADD VALUE cannot share a transaction with statements using the value
    with op.get_context().autocommit_block():
        op.execute("ALTER TYPE public.transaction_status ADD VALUE IF NOT EXISTS 'approved';")
        op.execute("ALTER TYPE public.transaction_status ADD VALUE IF NOT EXISTS 'rejected';")

    op.execute(
        """
        ALTER TABLE public.transactions
          ADD COLUMN IF NOT EXISTS approved_by uuid REFERENCES public.profiles(id),
          ADD COLUMN IF NOT EXISTS approved_at timestamptz,
          ADD COLUMN IF NOT EXISTS rejection_reason text,
          ADD COLUMN IF NOT EXISTS escalated_by uuid REFERENCES public.profiles(id),
          ADD COLUMN IF NOT EXISTS escalated_at timestamptz,
          ADD COLUMN IF NOT EXISTS escalation_reason text;

        CREATE INDEX IF NOT EXISTS ix_transactions_approval_status
          ON public.transactions (approval_status, created_at DESC);
        """
    )


def downgrade() -> None:
    # enum values cannot be dropped; rows using them are left as they are
    op.execute(
        """
        DROP INDEX IF EXISTS public.ix_transactions_approval_status;

        ALTER TABLE public.transactions
          DROP COLUMN IF EXISTS escalation_reason,
          DROP COLUMN IF EXISTS escalated_at,
          DROP COLUMN IF EXISTS escalated_by,
          DROP COLUMN IF EXISTS rejection_reason,
          DROP COLUMN IF EXISTS approved_at,
          DROP COLUMN IF EXISTS approved_by;
        """
    )
