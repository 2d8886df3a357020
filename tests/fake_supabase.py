"""
In-memory stand-in for the supabase-py client used by the tests.

Supports the subset of the PostgREST query builder, Storage and RPC API the
services call. Failures can be injected per table operation, per RPC and for
storage uploads.
"""

import re
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock


class FakeResponse:
    def __init__(self, data: Any, count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns: Optional[List[str]] = None
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self._limit: Optional[int] = None
        self._offset = 0
        self._count = False

    # Operations

    def select(self, columns: str = "*", count: Optional[str] = None):
        self.operation = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",") if c.strip()]
        self._count = count is not None
        return self

    def insert(self, data):
        self.operation = "insert"
        self.payload = data
        return self

    def update(self, data):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # Filters

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and str(row.get(column)) >= str(value))
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and str(row.get(column)) <= str(value))
        return self

    def ilike(self, column, pattern):
        self.filters.append(_ilike(column, pattern))
        return self

    def or_(self, expression: str):
        """Only ``column.ilike.pattern`` alternatives are understood."""
        checks = []
        for part in expression.split(","):
            column, operator, pattern = part.split(".", 2)
            if operator != "ilike":
                raise NotImplementedError(operator)
            checks.append(_ilike(column, pattern))
        self.filters.append(lambda row: any(check(row) for check in checks))
        return self

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def offset(self, n):
        self._offset = n
        return self

    # Execution

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        error = self.db.failures.get((self.table_name, self.operation))
        if error is not None:
            if (self.table_name, self.operation) in self.db.fail_once:
                self.db.fail_once.discard((self.table_name, self.operation))
                del self.db.failures[(self.table_name, self.operation)]
            raise error
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                row = {"id": str(uuid.uuid4()), "created_at": self.db.next_timestamp(), **item}
                rows.append(row)
                created.append(dict(row))
            return FakeResponse(created)

        if self.operation == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        if self.operation == "delete":
            removed = [row for row in rows if self._matches(row)]
            self.db.tables[self.table_name] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in removed])

        selected = [row for row in rows if self._matches(row)]
        for column, desc in reversed(self.orders):
            selected.sort(key=lambda r: (r.get(column) is None, str(r.get(column))), reverse=desc)
        total = len(selected)
        selected = selected[self._offset:]
        if self._limit is not None:
            selected = selected[:self._limit]
        if self.columns:
            selected = [{c: row.get(c) for c in self.columns} for row in selected]
        else:
            selected = [dict(row) for row in selected]
        return FakeResponse(selected, count=total if self._count else None)


def _ilike(column, pattern):
    regex = re.compile("^" + ".*".join(re.escape(p) for p in pattern.split("%")) + "$", re.IGNORECASE)
    return lambda row: row.get(column) is not None and bool(regex.match(str(row.get(column))))


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise RuntimeError(f"function {self.name} does not exist")
        return FakeResponse(handler(self.params))


class FakeBucket:
    def __init__(self, storage: "FakeStorage", bucket: str):
        self.storage = storage
        self.bucket = bucket

    def upload(self, path, content, file_options=None):
        if self.storage.fail_uploads:
            raise RuntimeError("storage unavailable")
        self.storage.files[(self.bucket, path)] = content
        return {"path": path}

    def get_public_url(self, path):
        return f"https://storage.test/{self.bucket}/{path}"

    def remove(self, paths):
        for path in paths:
            self.storage.files.pop((self.bucket, path), None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.files: Dict[tuple, bytes] = {}
        self.fail_uploads = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.failures: Dict[tuple, Exception] = {}
        self.fail_once: set = set()
        self.rpc_handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        self.rpc_calls: List[tuple] = []
        self.storage = FakeStorage()
        self.auth = MagicMock()
        self._clock = datetime(2024, 1, 1)

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    def fail(self, table: str, operation: str, error: Optional[Exception] = None, once: bool = False):
        self.failures[(table, operation)] = error or RuntimeError(f"{operation} on {table} failed")
        if once:
            self.fail_once.add((table, operation))

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])
