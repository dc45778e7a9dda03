"""PostgreSQL engine creation."""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL

_PING_TIMEOUT_SECONDS = 5


def postgres_url(cfg):
    """SQLAlchemy URL for the PostgreSQL settings of ``cfg``."""
    pg = cfg.postgres
    return URL.create(
        "postgresql",
        username=pg.user or None,
        password=pg.password or None,
        host=pg.host or None,
        port=pg.port or None,
        database=pg.dbname or None,
        query={"sslmode": pg.sslmode} if pg.sslmode else {},
    )


def _pool_options(pg):
    idle = max(pg.max_idle_conns, 1)
    if pg.max_open_conns > 0:
        pool_size = min(idle, pg.max_open_conns)
        max_overflow = pg.max_open_conns - pool_size
    else:
        pool_size = idle
        max_overflow = -1
    recycle = pg.conn_max_lifetime_minutes * 60 if pg.conn_max_lifetime_minutes > 0 else -1
    return {"pool_size": pool_size, "max_overflow": max_overflow, "pool_recycle": recycle}


def connect_postgres(cfg):
    """Create a pooled engine and check that the database answers; raise ConnectionError if not."""
    try:
        engine = create_engine(
            postgres_url(cfg),
            connect_args={"connect_timeout": _PING_TIMEOUT_SECONDS},
            **_pool_options(cfg.postgres),
        )
    except Exception as exc:
        raise ConnectionError(f"open postgres failed: {exc}") from exc

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        engine.dispose()
        raise ConnectionError(f"ping postgres failed: {exc}") from exc
    return engine