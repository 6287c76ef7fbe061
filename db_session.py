#db_session.py
from uuid import UUID
from psycopg2.extensions import cursor as Cursor


def set_db_actor(cur: Cursor, user_id: UUID) -> None:
    """
    Sets the DB session variable read by the row-level policies on
    transactions, wallets and float_allocations.
    Must run on the same connection/transaction as the statements it guards.
    """
    cur.execute("SELECT set_config('app.user_id', %s, true);", (str(user_id),))
