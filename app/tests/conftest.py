# app/tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.services import Database

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

# Columns the real schema fills with now() on insert
TIMESTAMP_COLUMNS = {
    "recipes": ("created_at",),
    "ingredients": ("created_at",),
    "clients": ("created_at",),
    "conversations": ("created_at", "updated_at"),
    "messages": ("created_at",),
}


# ---------------------------------------------------------------------
# Small in-memory FakeDB and FakeTable mimicking the supabase query builder
# ---------------------------------------------------------------------
class FakeTable:

    def __init__(self, db: "FakeDB", name: str):
        self.db = db
        self.name = name
        self._columns: Optional[List[str]] = None
        self._filters: List[Tuple[str, str, Any]] = []
        self._order: List[Tuple[str, bool]] = []
        self._limit: Optional[int] = None
        self._offset = 0
        self._operation: Optional[Tuple[str, Any]] = None

    # Query building (chainable)
    def select(self, columns: str = "*", **kwargs):
        if columns.strip() != "*":
            self._columns = [c.strip() for c in columns.split(",") if c.strip()]
        return self

    def eq(self, col, val):
        self._filters.append(("eq", col, val))
        return self

    def in_(self, col, values):
        self._filters.append(("in", col, list(values)))
        return self

    def order(self, col, desc: bool = False, **kwargs):
        self._order.append((col, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def range(self, start, end):
        self._offset = start
        self._limit = end - start + 1
        return self

    def insert(self, payload):
        self._operation = ("insert", payload)
        return self

    def update(self, payload):
        self._operation = ("update", payload)
        return self

    def delete(self):
        self._operation = ("delete", None)
        return self

    # Execution
    def _matches(self, row: Dict[str, Any]) -> bool:
        for kind, col, val in self._filters:
            if kind == "eq" and str(row.get(col)) != str(val):
                return False
            if kind == "in" and str(row.get(col)) not in {str(v) for v in val}:
                return False
        return True

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self._columns is None:
            return dict(row)
        return {c: row.get(c) for c in self._columns}

    def execute(self):
        op = self._operation[0] if self._operation else "select"
        self.db.calls.append((self.name, op))
        if (self.name, op) in self.db.failures:
            raise APIError(
                {"message": f"injected failure on {self.name}.{op}", "code": "XX000"}
            )
        rows = self.db.tables.setdefault(self.name, [])

        if op == "select":
            selected = [r for r in rows if self._matches(r)]
            for col, desc in reversed(self._order):
                selected.sort(
                    key=lambda r: (r.get(col) is None, r.get(col) if r.get(col) is not None else 0),
                    reverse=desc,
                )
            selected = selected[self._offset :]
            if self._limit:
                selected = selected[: self._limit]
            if self.db.max_rows is not None:
                selected = selected[: self.db.max_rows]
            return SimpleNamespace(data=[self._project(r) for r in selected])

        if op == "insert":
            payload = self._operation[1]
            payloads = payload if isinstance(payload, list) else [payload]
            inserted = []
            for item in payloads:
                row = dict(item)
                row["id"] = self.db.next_id(self.name)
                for column in TIMESTAMP_COLUMNS.get(self.name, ()):
                    row.setdefault(column, self.db.next_timestamp())
                rows.append(row)
                inserted.append(dict(row))
            return SimpleNamespace(data=inserted)

        if op == "update":
            updated = []
            for r in rows:
                if self._matches(r):
                    r.update(self._operation[1])
                    updated.append(dict(r))
            return SimpleNamespace(data=updated)

        if op == "delete":
            kept, deleted = [], []
            for r in rows:
                (deleted if self._matches(r) else kept).append(r)
            self.db.tables[self.name] = kept
            return SimpleNamespace(data=deleted)

        return SimpleNamespace(data=[])


class FakeDB:

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.counters: Dict[str, int] = {}
        self.failures: Set[Tuple[str, str]] = set()
        self.calls: List[Tuple[str, str]] = []
        self._clock = 0
        # PostgREST max-rows: every select response is cut to this many rows
        self.max_rows: Optional[int] = None

    def table(self, name):
        return FakeTable(self, name)

    def next_id(self, name):
        self.counters.setdefault(name, 0)
        self.counters[name] += 1
        return self.counters[name]

    def next_timestamp(self) -> str:
        self._clock += 1
        return (_EPOCH + timedelta(seconds=self._clock)).isoformat()

    def fail_on(self, table: str, operation: str) -> None:
        """Make the next and every later `operation` on `table` raise APIError."""
        self.failures.add((table, operation))

    def rows(self, table: str, **where) -> List[Dict[str, Any]]:
        return [
            r
            for r in self.tables.get(table, [])
            if all(str(r.get(k)) == str(v) for k, v in where.items())
        ]


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------
@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def db(fake_db):
    return Database(fake_db)


@pytest.fixture
def fake_supabase_client(monkeypatch, fake_db):
    """Install the FakeDB as the global supabase client."""
    fake = SimpleNamespace(client=fake_db, health_check=lambda: True, diagnostics=lambda: {})
    monkeypatch.setattr("app.config.supabase.supabase_client", fake)
    return fake


@pytest.fixture
def api_client(db, monkeypatch):
    import main
    from app.api.dependencies import get_database

    monkeypatch.setattr(main.supabase_client, "health_check", lambda: True)
    main.app.dependency_overrides[get_database] = lambda: db
    with TestClient(main.app) as client:
        yield client
    main.app.dependency_overrides.clear()


@pytest.fixture
def bolo():
    return {
        "name": "Bolo",
        "category": "Sobremesa",
        "measurement_unit": "g",
        "cooking_index": 1.2,
        "ingredients": [
            {"ingredient_id": 7, "quantity": "200", "unit": "g", "correction_factor": "1.1"}
        ],
        "steps": [{"number": 1, "description": "Misturar"}],
    }
