"""Versioned JSON document store with optimistic concurrency control.

Each document is one row keyed by name, carrying an integer version that
starts at 1 and grows by exactly one per successful write. Writers send the
version they last read; the write only lands if that version is still
current, checked and applied in a single conditional statement:

    UPDATE config_documents SET ... , version = version + 1
    WHERE key = %s AND version = %s RETURNING version

No row returned means someone else won. The loser gets a VersionConflict
carrying the current version and must re-fetch, reapply and resubmit; the
store never retries on its own.

Documents that have never been written are seeded from seed.DOCUMENTS the
first time they are read.
"""

import copy
import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from pydantic import ValidationError

from .migrations import ensure_schema as migrate_once
from .schemas import dump_document, normalize_plan_flags, validation_details
from .seed import DOCUMENTS, DocumentSpec

log = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


class ConfigStoreError(Exception):
    status = 500


class ValidationFailed(ConfigStoreError):
    status = 400

    def __init__(self, key: str, details: list[dict]):
        super().__init__(f"Invalid document for {key!r}")
        self.key = key
        self.details = details


class VersionConflict(ConfigStoreError):
    status = 409

    def __init__(self, key: str, expected_version: Optional[int], current_version: int):
        super().__init__(
            f"Version conflict on {key!r}: expected {expected_version}, "
            f"current {current_version}"
        )
        self.key = key
        self.expected_version = expected_version
        self.current_version = current_version


class UnknownDocument(ConfigStoreError):
    status = 404

    def __init__(self, key: str):
        super().__init__(f"Unknown document {key!r}")
        self.key = key


class StorageUnavailable(ConfigStoreError):
    status = 500


@dataclass(frozen=True)
class StoredRow:
    key: str
    value: Any
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Document:
    key: str
    value: dict
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "value": self.value,
            "version": self.version,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@contextmanager
def _storage_errors(action: str):
    try:
        yield
    except psycopg.Error as e:
        log.exception(f"Storage failure during {action}")
        raise StorageUnavailable(f"{action} failed") from e


class PostgresBackend:
    """Rows live in config_documents; see migrations.py for the DDL.

    `connect` returns an autocommit psycopg connection, normally the
    request-scoped one from db.get_db(). Every write below is one statement,
    so it either commits whole or not at all.
    """

    def __init__(self, connect: Callable[[], psycopg.Connection], auto_migrate: bool = True):
        self._connect = connect
        self._auto_migrate = auto_migrate

    def ensure_schema(self) -> None:
        if not self._auto_migrate:
            return
        with _storage_errors("schema migration"):
            migrate_once(self._connect())

    def fetch(self, key: str) -> Optional[StoredRow]:
        with _storage_errors("read"):
            with self._connect().cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT key, value, version, created_at, updated_at
                    FROM config_documents WHERE key = %s
                    """,
                    (key,),
                )
                row = cur.fetchone()
        if row is None:
            return None
        return StoredRow(**row)

    def current_version(self, key: str) -> int:
        with _storage_errors("version read"):
            with self._connect().cursor() as cur:
                cur.execute("SELECT version FROM config_documents WHERE key = %s", (key,))
                row = cur.fetchone()
        return row[0] if row else 0

    def insert(self, key: str, value: dict) -> Optional[int]:
        """Create the row at version 1. None if it already exists."""
        with _storage_errors("insert"):
            with self._connect().cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO config_documents (key, value, version)
                    VALUES (%s, %s, 1)
                    ON CONFLICT (key) DO NOTHING
                    RETURNING version
                    """,
                    (key, Jsonb(value)),
                )
                row = cur.fetchone()
        return row[0] if row else None

    def update_if_version(self, key: str, value: dict, expected_version: int) -> Optional[int]:
        """Replace the value only if the row is still at expected_version."""
        with _storage_errors("update"):
            with self._connect().cursor() as cur:
                cur.execute(
                    """
                    UPDATE config_documents
                    SET value = %s, version = version + 1, updated_at = now()
                    WHERE key = %s AND version = %s
                    RETURNING version
                    """,
                    (Jsonb(value), key, expected_version),
                )
                row = cur.fetchone()
        return row[0] if row else None

    def force_update(self, key: str, value: dict) -> Optional[int]:
        with _storage_errors("update"):
            with self._connect().cursor() as cur:
                cur.execute(
                    """
                    UPDATE config_documents
                    SET value = %s, version = version + 1, updated_at = now()
                    WHERE key = %s
                    RETURNING version
                    """,
                    (Jsonb(value), key),
                )
                row = cur.fetchone()
        return row[0] if row else None

    def list_rows(self) -> list[StoredRow]:
        with _storage_errors("list"):
            with self._connect().cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT key, value, version, created_at, updated_at
                    FROM config_documents ORDER BY key
                    """
                )
                return [StoredRow(**row) for row in cur.fetchall()]


class MemoryBackend:
    """In-process backend for local development and tests.

    A single lock makes each compare-and-write atomic, standing in for the
    conditional UPDATE of the Postgres backend. Values are stored as JSON
    text so callers never share containers with the store.
    """

    def __init__(self):
        self._rows: dict[str, StoredRow] = {}
        self._lock = threading.Lock()

    def ensure_schema(self) -> None:
        pass

    def fetch(self, key: str) -> Optional[StoredRow]:
        with self._lock:
            return self._rows.get(key)

    def current_version(self, key: str) -> int:
        with self._lock:
            row = self._rows.get(key)
            return row.version if row else 0

    def insert(self, key: str, value: dict) -> Optional[int]:
        with self._lock:
            if key in self._rows:
                return None
            now = datetime.now(timezone.utc)
            self._rows[key] = StoredRow(key, json.dumps(value), 1, now, now)
            return 1

    def update_if_version(self, key: str, value: dict, expected_version: int) -> Optional[int]:
        with self._lock:
            row = self._rows.get(key)
            if row is None or row.version != expected_version:
                return None
            return self._replace(row, value)

    def force_update(self, key: str, value: dict) -> Optional[int]:
        with self._lock:
            row = self._rows.get(key)
            if row is None:
                return None
            return self._replace(row, value)

    def list_rows(self) -> list[StoredRow]:
        with self._lock:
            return [self._rows[k] for k in sorted(self._rows)]

    def _replace(self, row: StoredRow, value: dict) -> int:
        new = StoredRow(
            row.key,
            json.dumps(value),
            row.version + 1,
            row.created_at,
            datetime.now(timezone.utc),
        )
        self._rows[row.key] = new
        return new.version


class ConfigStore:
    def __init__(
        self,
        backend,
        allow_unversioned_writes: bool = False,
        documents: dict[str, DocumentSpec] = DOCUMENTS,
    ):
        self.backend = backend
        self.allow_unversioned_writes = allow_unversioned_writes
        self.documents = documents
        # Seeds are validated and normalized once, not per request
        self._seeds = {
            key: self._normalize(spec, spec.seed_value()) for key, spec in documents.items()
        }

    def _spec(self, key: str) -> DocumentSpec:
        spec = self.documents.get(key)
        if spec is None:
            raise UnknownDocument(key)
        return spec

    def _normalize(self, spec: DocumentSpec, value: Any) -> dict:
        if not isinstance(value, dict):
            raise ValidationFailed(
                spec.key,
                [{"field": "value", "message": "Document must be a JSON object", "type": "dict_type"}],
            )
        raw = normalize_plan_flags(copy.deepcopy(value))
        try:
            model = spec.schema.model_validate(raw)
        except ValidationError as e:
            raise ValidationFailed(spec.key, validation_details(e)) from e
        return dump_document(model)

    def get(self, key: str) -> Document:
        """Read a document, seeding it at version 1 if it has never been written."""
        self._spec(key)
        self.backend.ensure_schema()

        row = self.backend.fetch(key)
        if row is None:
            # Concurrent first reads race here; ON CONFLICT lets exactly one insert land
            if self.backend.insert(key, copy.deepcopy(self._seeds[key])) is not None:
                log.info(f"Seeded default document: key={key}")
            row = self.backend.fetch(key)
            if row is None:
                raise StorageUnavailable(f"Document {key!r} missing after seeding")

        value = row.value
        if isinstance(value, (str, bytes)):
            value = json.loads(value)
        return Document(
            key=key,
            value=normalize_plan_flags(value),
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def put(self, key: str, value: Any, expected_version: Optional[int] = None) -> int:
        """Write value if expected_version is still current. Returns the new version.

        expected_version of None or 0 means the caller never read the document.
        That is accepted for the very first write; against an existing row it
        is a conflict unless allow_unversioned_writes is set, in which case it
        overwrites.
        """
        normalized = self._normalize(self._spec(key), value)
        self.backend.ensure_schema()

        if expected_version:
            new_version = self.backend.update_if_version(key, normalized, expected_version)
            if new_version is None:
                current = self.backend.current_version(key)
                log.warning(
                    f"Version conflict: key={key} expected={expected_version} current={current}"
                )
                raise VersionConflict(key, expected_version, current)
        else:
            new_version = self.backend.insert(key, normalized)
            if new_version is None:
                if not self.allow_unversioned_writes:
                    current = self.backend.current_version(key)
                    log.warning(f"Unversioned write rejected: key={key} current={current}")
                    raise VersionConflict(key, expected_version, current)
                new_version = self.backend.force_update(key, normalized)
                if new_version is None:
                    raise StorageUnavailable(f"Document {key!r} vanished during write")
                log.warning(f"Unversioned overwrite: key={key} version={new_version}")

        log.info(f"Document written: key={key} version={new_version}")
        return new_version

    def describe(self) -> list[dict]:
        """Summaries of every stored document, for operators."""
        self.backend.ensure_schema()
        summaries = []
        for row in self.backend.list_rows():
            text = row.value if isinstance(row.value, str) else json.dumps(row.value)
            summary = {
                "key": row.key,
                "version": row.version,
                "createdAt": row.created_at.isoformat() if row.created_at else None,
                "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
                "valuePreview": f"{text[:PREVIEW_LENGTH]}...",
            }
            spec = self.documents.get(row.key)
            if spec is not None:
                summary["description"] = spec.description
            try:
                value = json.loads(text)
            except ValueError:
                summary["error"] = "Failed to parse JSON"
                summaries.append(summary)
                continue
            if isinstance(value, dict) and isinstance(value.get("plans"), list):
                summary["planCount"] = len(value["plans"])
                summary["stateCount"] = len(value.get("stateFilingFees") or {})
                summary["plans"] = ", ".join(
                    f"{p.get('name')}: {p.get('displayPrice') or p.get('price')}"
                    for p in value["plans"]
                    if isinstance(p, dict)
                )
            summaries.append(summary)
        return summaries
