"""Versioned schema migrations for the config store.

Migrations are applied in order inside a single transaction guarded by a
Postgres advisory lock, so several processes starting at once apply each
migration exactly once. Applied versions are recorded in schema_migrations.

Run them at deploy time with `flask --app configstore init-db`. With
AUTO_MIGRATE enabled the first request of each process runs them as well;
after one successful pass the process-wide flag skips the check entirely.
"""

import logging
import threading

log = logging.getLogger(__name__)

# Arbitrary constant shared by every process that migrates this schema
MIGRATION_LOCK_ID = 748_213_001

MIGRATIONS: list[tuple[int, str, str]] = [
    (
        1,
        "create config_documents",
        """
        CREATE TABLE IF NOT EXISTS config_documents (
            key TEXT PRIMARY KEY,
            value JSONB NOT NULL,
            version INTEGER NOT NULL DEFAULT 1 CHECK (version >= 1),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """,
    ),
]

_schema_ready = False
_ready_lock = threading.Lock()


def applied_versions(conn) -> set[int]:
    with conn.cursor() as cur:
        cur.execute("SELECT version FROM schema_migrations")
        return {row[0] for row in cur.fetchall()}


def migrate(conn) -> list[int]:
    """Apply pending migrations. Returns the versions applied by this call."""
    applied = []
    with conn.transaction():
        with conn.cursor() as cur:
            cur.execute("SELECT pg_advisory_xact_lock(%s)", (MIGRATION_LOCK_ID,))
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    description TEXT NOT NULL,
                    applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
                )
                """
            )
        done = applied_versions(conn)
        with conn.cursor() as cur:
            for version, description, sql in MIGRATIONS:
                if version in done:
                    continue
                cur.execute(sql)
                cur.execute(
                    "INSERT INTO schema_migrations (version, description) VALUES (%s, %s)",
                    (version, description),
                )
                applied.append(version)
                log.info(f"Applied migration {version}: {description}")
    return applied


def ensure_schema(conn) -> None:
    """Migrate once per process; later calls return immediately."""
    global _schema_ready
    if _schema_ready:
        return
    with _ready_lock:
        if not _schema_ready:
            migrate(conn)
            _schema_ready = True


def reset_schema_flag() -> None:
    global _schema_ready
    _schema_ready = False
