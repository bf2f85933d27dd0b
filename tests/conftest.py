import copy
import os

import psycopg
import pytest

from configstore import create_app, migrations
from configstore.seed import PRICING_KEY
from configstore.store import ConfigStore, MemoryBackend, PostgresBackend


@pytest.fixture
def store():
    return ConfigStore(MemoryBackend())


@pytest.fixture
def pricing(store):
    """A fresh copy of the seeded pricing document."""
    return copy.deepcopy(store.get(PRICING_KEY).value)


@pytest.fixture
def app():
    return create_app({"TESTING": True, "CONFIG_BACKEND": "memory"})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def database_url():
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")
    return url


@pytest.fixture
def pg_connect(database_url):
    """Factory for autocommit connections against a migrated, empty schema."""
    opened = []

    def connect():
        conn = psycopg.connect(database_url, autocommit=True)
        opened.append(conn)
        return conn

    setup = connect()
    migrations.reset_schema_flag()
    migrations.migrate(setup)
    setup.execute("DELETE FROM config_documents")

    yield connect

    setup.execute("DELETE FROM config_documents")
    for conn in opened:
        conn.close()


@pytest.fixture
def pg_store(pg_connect):
    conn = pg_connect()
    return ConfigStore(PostgresBackend(lambda: conn))
