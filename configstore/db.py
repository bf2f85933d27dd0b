from flask import current_app, g
from psycopg_pool import ConnectionPool

from .config import Config

# Connection pool - shared across requests
_pool: ConnectionPool | None = None


def get_pool() -> ConnectionPool:
    global _pool
    if _pool is None:
        _pool = ConnectionPool(
            current_app.config.get("DATABASE_URL", Config.DATABASE_URL),
            min_size=current_app.config.get("DB_POOL_MIN_SIZE", Config.DB_POOL_MIN_SIZE),
            max_size=current_app.config.get("DB_POOL_MAX_SIZE", Config.DB_POOL_MAX_SIZE),
            kwargs={"autocommit": True},  # writes open explicit transactions
            open=True,
        )
    return _pool


def get_db():
    """Get a database connection for the current request."""
    if "db" not in g:
        g.db = get_pool().getconn()
    return g.db


def get_store():
    """Get the ConfigStore bound to the current app.

    The store itself is stateless apart from its backend, so one instance
    is shared across requests. Postgres-backed stores borrow the request's
    pooled connection through get_db().
    """
    return current_app.extensions["configstore"]


def close_db(exc=None):
    """Return connection to pool at end of request."""
    db = g.pop("db", None)
    if db is not None:
        get_pool().putconn(db)


def init_app(app):
    app.teardown_appcontext(close_db)
