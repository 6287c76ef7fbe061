"""baseline schema

Revision ID: 0001_baseline_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from __future__ import annotations

from alembic import op


revision = "0001_baseline_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")

    op.execute(
        """
        DO $$
        BEGIN
          IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'app_role') THEN
            CREATE TYPE public.app_role AS ENUM
              ('super_agent', 'sales_assistant', 'sales_agent', 'hr_finance', 'marketing');
          END IF;
          IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'transaction_type') THEN
            CREATE TYPE public.transaction_type AS ENUM
              ('airtime', 'mtn_momo', 'digicash', 'm_gurush', 'mpesa_kenya', 'uganda_mobile_money');
          END IF;
          IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'currency_code') THEN
            CREATE TYPE public.currency_code AS ENUM ('USD', 'SSP', 'KES', 'UGX');
          END IF;
          IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'transaction_status') THEN
            CREATE TYPE public.transaction_status AS ENUM
              ('pending', 'completed', 'failed', 'cancelled');
          END IF;
          IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'approval_status') THEN
            CREATE TYPE public.approval_status AS ENUM ('pending', 'approved', 'rejected', 'escalated');
          END IF;
        END $$;
        """
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS public.profiles (
          id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
          email text NOT NULL,
          password_hash text NOT NULL,
          full_name text,
          phone text,
          photo_url text,
          national_id_url text,
          created_at timestamptz NOT NULL DEFAULT now(),
          updated_at timestamptz NOT NULL DEFAULT now()
        );
        CREATE UNIQUE INDEX IF NOT EXISTS ux_profiles_email_lower
          ON public.profiles (lower(email));

        CREATE TABLE IF NOT EXISTS public.user_roles (
          id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
          user_id uuid NOT NULL UNIQUE REFERENCES public.profiles(id) ON DELETE CASCADE,
          role public.app_role NOT NULL DEFAULT 'sales_agent',
          created_at timestamptz NOT NULL DEFAULT now()
        );

        CREATE TABLE IF NOT EXISTS public.wallets (
          id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
          user_id uuid NOT NULL REFERENCES public.profiles(id) ON DELETE CASCADE,
          currency public.currency_code NOT NULL,
          balance numeric(18,2) NOT NULL DEFAULT 0,
          updated_at timestamptz NOT NULL DEFAULT now(),
          UNIQUE (user_id, currency)
        );

        CREATE TABLE IF NOT EXISTS public.transactions (
          id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
          agent_id uuid NOT NULL REFERENCES public.profiles(id),
          transaction_type public.transaction_type NOT NULL,
          amount numeric(18,2) NOT NULL CHECK (amount >= 0.01 AND amount <= 1000000),
          currency public.currency_code NOT NULL,
          recipient_phone text,
          recipient_name text,
          status public.transaction_status NOT NULL DEFAULT 'pending',
          approval_status public.approval_status NOT NULL DEFAULT 'pending',
          commission_amount numeric(18,2),
          metadata jsonb NOT NULL DEFAULT '{}'::jsonb,
          created_at timestamptz NOT NULL DEFAULT now()
        );
        CREATE INDEX IF NOT EXISTS ix_transactions_agent_created
          ON public.transactions (agent_id, created_at DESC);

        CREATE TABLE IF NOT EXISTS public.float_allocations (
          id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
          agent_id uuid NOT NULL REFERENCES public.profiles(id),
          amount numeric(18,2) NOT NULL CHECK (amount > 0),
          currency public.currency_code NOT NULL,
          allocated_by uuid REFERENCES public.profiles(id),
          notes text,
          created_at timestamptz NOT NULL DEFAULT now()
        );

        CREATE TABLE IF NOT EXISTS public.audit_logs (
          id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
          actor_user_id uuid,
          action text NOT NULL,
          entity_type text NOT NULL,
          entity_id text,
          old_values jsonb,
          new_values jsonb,
          ip_address text,
          request_id text,
          created_at timestamptz NOT NULL DEFAULT now()
        );
        CREATE INDEX IF NOT EXISTS ix_audit_logs_created_at
          ON public.audit_logs (created_at DESC);
        """
    )


def downgrade() -> None:
    op.execute(
        """
        DROP TABLE IF EXISTS public.audit_logs;
        DROP TABLE IF EXISTS public.float_allocations;
        DROP TABLE IF EXISTS public.transactions;
        DROP TABLE IF EXISTS public.wallets;
        DROP TABLE IF EXISTS public.user_roles;
        DROP TABLE IF EXISTS public.profiles;
        DROP TYPE IF EXISTS public.approval_status;
        DROP TYPE IF EXISTS public.transaction_status;
        DROP TYPE IF EXISTS public.currency_code;
        DROP TYPE IF EXISTS public.transaction_type;
        DROP TYPE IF EXISTS public.app_role;
        """
    )
