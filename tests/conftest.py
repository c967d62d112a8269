"""
Pytest fixtures for devotional_core tests.

Every store lives in a temporary data directory. The hosted backend is replaced by
FakeBackend, an in-memory Postgrest/Storage lookalike served through httpx.MockTransport.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

BACKEND_URL = "https://project.example.supabase.co"
ANON_KEY = "anon-test-key"


def _fmt(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class FakeBackend:
    """
    Just enough of Postgrest + Storage for the client: eq/in filters, order, limit,
    insert, upsert with on_conflict, update, delete, object upload/remove/download.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.objects: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self._failures: dict[str, int] = {}
        self._next_id = 1

    def seed(self, table: str, *rows: dict[str, Any]) -> None:
        for row in rows:
            self.tables.setdefault(table, []).append(self._with_id(dict(row)))

    def fail(self, table: str, status_code: int = 500) -> None:
        """Make every request to table return status_code."""
        self._failures[table] = status_code

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])

    def calls(self, method: str, table: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(f"/{table}")]

    def _with_id(self, row: dict[str, Any]) -> dict[str, Any]:
        if "id" not in row:
            row["id"] = self._next_id
            self._next_id += 1
        return row

    @staticmethod
    def _matches(row: dict[str, Any], params: list[tuple[str, str]]) -> bool:
        for column, expr in params:
            op, _, operand = expr.partition(".")
            if op == "eq" and _fmt(row.get(column)) != operand:
                return False
            if op == "in" and _fmt(row.get(column)) not in operand.strip("()").split(","):
                return False
        return True

    def _filtered(self, table: str, params: httpx.QueryParams) -> list[dict[str, Any]]:
        filters = [
            (k, v) for k, v in params.multi_items() if k not in ("select", "order", "limit", "on_conflict")
        ]
        return [r for r in self.tables.get(table, []) if self._matches(r, filters)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/storage/v1/"):
            return self._storage(request, path[len("/storage/v1/"):])
        table = path.rsplit("/", 1)[-1]
        if table in self._failures:
            return httpx.Response(self._failures[table], json={"message": "forced failure"})
        body = json.loads(request.content) if request.content else None
        params = request.url.params
        representation = "return=representation" in request.headers.get("Prefer", "")

        if request.method == "GET":
            rows = self._filtered(table, params)
            for term in reversed(params.get("order", "").split(",") if params.get("order") else []):
                column, *flags = term.split(".")
                present = [r for r in rows if r.get(column) is not None]
                missing = [r for r in rows if r.get(column) is None]
                present.sort(key=lambda r: r[column], reverse="desc" in flags)
                rows = present + missing
            if params.get("limit"):
                rows = rows[: int(params["limit"])]
            return httpx.Response(200, json=rows)

        if request.method == "POST":
            incoming = body if isinstance(body, list) else [body]
            conflict = params.get("on_conflict")
            written = []
            for row in incoming:
                existing = None
                if conflict:
                    keys = conflict.split(",")
                    existing = next(
                        (r for r in self.tables.get(table, []) if all(r.get(k) == row.get(k) for k in keys)),
                        None,
                    )
                if existing is not None:
                    existing.update(row)
                    written.append(existing)
                else:
                    new = self._with_id(dict(row))
                    self.tables.setdefault(table, []).append(new)
                    written.append(new)
            return httpx.Response(201, json=written) if representation else httpx.Response(201)

        if request.method == "PATCH":
            rows = self._filtered(table, params)
            for r in rows:
                r.update(body)
            return httpx.Response(200, json=rows)

        if request.method == "DELETE":
            doomed = self._filtered(table, params)
            self.tables[table] = [r for r in self.tables.get(table, []) if r not in doomed]
            return httpx.Response(200, json=doomed)

        return httpx.Response(405)

    def _storage(self, request: httpx.Request, rest: str) -> httpx.Response:
        if request.method == "GET" and rest.startswith("object/public/"):
            key = rest[len("object/public/"):]
            if key not in self.objects:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, content=self.objects[key])
        if request.method == "POST" and rest.startswith("object/"):
            self.objects[rest[len("object/"):]] = request.content
            return httpx.Response(200, json={"Key": rest})
        if request.method == "DELETE" and rest.startswith("object/"):
            bucket = rest[len("object/"):]
            for prefix in json.loads(request.content)["prefixes"]:
                self.objects.pop(f"{bucket}/{prefix}", None)
            return httpx.Response(200, json=[])
        return httpx.Response(405)


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Temporary data directory with backend and payment env cleared."""
    path = tmp_path / "data"
    monkeypatch.setenv("DEVOTIONAL_DATA_DIR", str(path))
    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "PAYSTACK_SECRET_KEY", "PAYSTACK_PUBLIC_KEY"):
        monkeypatch.setenv(name, "")

    from devotional_core.config import reset_settings_cache

    reset_settings_cache()
    yield path
    reset_settings_cache()


@pytest.fixture
def preferences(data_dir):
    from devotional_core.database import PreferencesStore

    store = PreferencesStore(data_dir)
    store.ensure_schema()
    return store


@pytest.fixture
def favorites_store(data_dir):
    from devotional_core.database import FavoritesStore

    store = FavoritesStore(data_dir)
    store.ensure_schema()
    return store


@pytest.fixture
def payment_store(data_dir):
    from devotional_core.database import PaymentStore

    store = PaymentStore(data_dir)
    store.ensure_schema()
    return store


@pytest.fixture
def translation_metadata(data_dir):
    from devotional_core.database import TranslationMetadataStore

    store = TranslationMetadataStore(data_dir)
    store.ensure_schema()
    return store


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def remote(backend):
    """PostgrestClient wired to the in-memory backend."""
    from devotional_core.remote import PostgrestClient

    client = PostgrestClient(BACKEND_URL, ANON_KEY, transport=httpx.MockTransport(backend.handler))
    yield client
    client.close()
