import os


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    APP_NAME = os.environ.get("APP_NAME", "Config Store")
    DATABASE_URL = os.environ.get("DATABASE_URL", "postgresql://localhost/app")
    # "postgres" in production, "memory" for local development and tests
    CONFIG_BACKEND = os.environ.get("CONFIG_BACKEND", "postgres")
    DB_POOL_MIN_SIZE = int(os.environ.get("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE = int(os.environ.get("DB_POOL_MAX_SIZE", "10"))
    # Run pending migrations on the first request instead of only via `flask init-db`
    AUTO_MIGRATE = _flag("AUTO_MIGRATE", "true")
    # When false, a write without expectedVersion is only accepted if the document
    # does not exist yet
    ALLOW_UNVERSIONED_WRITES = _flag("ALLOW_UNVERSIONED_WRITES", "false")
