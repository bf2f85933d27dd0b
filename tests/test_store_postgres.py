"""Runs against a real database; set TEST_DATABASE_URL to enable."""

import copy
import threading

import pytest

from configstore import migrations
from configstore.seed import PRICING_KEY
from configstore.store import ConfigStore, PostgresBackend, VersionConflict

from .helpers import set_plan_price

pytestmark = pytest.mark.postgres


def test_migrations_are_idempotent(pg_connect):
    conn = pg_connect()
    assert migrations.migrate(conn) == []
    assert migrations.applied_versions(conn) == {v for v, _, _ in migrations.MIGRATIONS}


def test_seed_on_first_read(pg_store):
    first = pg_store.get(PRICING_KEY)
    second = pg_store.get(PRICING_KEY)
    assert first.version == second.version == 1
    assert first.value == second.value
    assert first.value["plans"][0]["name"] == "STARTER"


def test_conditional_update(pg_store):
    doc = pg_store.get(PRICING_KEY)
    value = set_plan_price(copy.deepcopy(doc.value), 1, 139)
    assert pg_store.put(PRICING_KEY, value, doc.version) == 2

    with pytest.raises(VersionConflict) as exc:
        pg_store.put(PRICING_KEY, set_plan_price(copy.deepcopy(doc.value), 1, 1), doc.version)
    assert exc.value.current_version == 2

    stored = pg_store.get(PRICING_KEY)
    assert stored.version == 2
    assert stored.value == value
    assert stored.updated_at >= stored.created_at


def test_concurrent_writers_separate_connections(pg_connect):
    writers = 6
    stores = [ConfigStore(PostgresBackend(lambda c=pg_connect(): c)) for _ in range(writers)]
    base = stores[0].get(PRICING_KEY)
    barrier = threading.Barrier(writers)
    outcomes = []
    lock = threading.Lock()

    def write(store, price):
        value = set_plan_price(copy.deepcopy(base.value), 1, price)
        barrier.wait()
        try:
            result = ("ok", store.put(PRICING_KEY, value, base.version))
        except VersionConflict as e:
            result = ("conflict", e.current_version)
        with lock:
            outcomes.append(result)

    threads = [
        threading.Thread(target=write, args=(store, 300 + i)) for i, store in enumerate(stores)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == [("conflict", 2)] * (writers - 1) + [("ok", 2)]
    assert stores[0].get(PRICING_KEY).version == 2


def test_concurrent_first_reads_seed_once(pg_connect):
    readers = 5
    stores = [ConfigStore(PostgresBackend(lambda c=pg_connect(): c)) for _ in range(readers)]
    barrier = threading.Barrier(readers)
    versions = []

    def read(store):
        barrier.wait()
        versions.append(store.get(PRICING_KEY).version)

    threads = [threading.Thread(target=read, args=(s,)) for s in stores]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert versions == [1] * readers
