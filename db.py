import psycopg2.extras
from psycopg2.pool import SimpleConnectionPool
from contextlib import contextmanager
from settings import settings

_pool: SimpleConnectionPool | None = None


def _session_timeout() -> str:
    return f"{int(settings.DB_STATEMENT_TIMEOUT_MS)}ms"


def _prepare_session(conn) -> None:
    """Per-checkout session settings; a pooled connection may have been reset."""
    timeout = _session_timeout()
    with conn.cursor() as cur:
        cur.execute("SET statement_timeout = %s;", (timeout,))
        cur.execute("SET idle_in_transaction_session_timeout = %s;", (timeout,))
        cur.execute("SET application_name = 'agency_api';")


def init_pool():
    """
    Initialize the PostgreSQL connection pool.
    Called lazily on the first checkout.
    """
    global _pool
    if _pool is not None:
        return
    if not (settings.DATABASE_URL or "").strip():
        raise RuntimeError("DATABASE_URL is not set.")

    # uuid columns come back as uuid.UUID
    psycopg2.extras.register_uuid()
    _pool = SimpleConnectionPool(
        minconn=1,
        maxconn=settings.DB_POOL_MAX,
        dsn=settings.DATABASE_URL,
        connect_timeout=5,
    )


def close_pool():
    """
    Gracefully close all pooled connections (app shutdown).
    """
    global _pool
    if _pool:
        _pool.closeall()
        _pool = None


@contextmanager
def get_conn():
    """
    One connection, one transaction: commit when the block exits cleanly,
    roll back on any exception and re-raise it.
    """
    if _pool is None:
        init_pool()

    conn = _pool.getconn()
    try:
        _prepare_session(conn)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        _pool.putconn(conn)
