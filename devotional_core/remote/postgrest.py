"""
Minimal Postgrest/Storage client for the hosted backend.

Responsibilities:
- Send REST requests to <SUPABASE_URL>/rest/v1 with the anon key (apikey + Bearer).
- Offer a small fluent query builder: filters first, then a terminal call
  (execute/single/maybe_single/insert/upsert/update/delete).
- Wrap transport failures and non-2xx responses in RemoteError.
- Upload/remove objects in storage buckets and build public object URLs.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

import httpx

from devotional_core.config import Settings
from devotional_core.core.exceptions import ConfigurationError, NotFoundError, RemoteError
from devotional_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 20.0


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class QueryBuilder:
    """Filters and modifiers for one table. Create via PostgrestClient.table(name)."""

    def __init__(self, client: "PostgrestClient", table: str) -> None:
        self._client = client
        self._table = table
        self._columns = "*"
        self._filters: list[tuple[str, str]] = []
        self._order: list[str] = []
        self._limit: int | None = None

    def select(self, columns: str = "*") -> "QueryBuilder":
        self._columns = columns
        return self

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        self._filters.append((column, f"eq.{_format_value(value)}"))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        joined = ",".join(_format_value(v) for v in values)
        self._filters.append((column, f"in.({joined})"))
        return self

    def order(self, column: str, ascending: bool = True, nulls_last: bool = False) -> "QueryBuilder":
        term = f"{column}.{'asc' if ascending else 'desc'}"
        self._order.append(f"{term}.nullslast" if nulls_last else term)
        return self

    def limit(self, n: int) -> "QueryBuilder":
        self._limit = n
        return self

    def _params(self, *, with_select: bool = True) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if with_select:
            params.append(("select", self._columns))
        params.extend(self._filters)
        if self._order:
            params.append(("order", ",".join(self._order)))
        if self._limit is not None:
            params.append(("limit", str(self._limit)))
        return params

    def execute(self) -> list[dict[str, Any]]:
        resp = self._client.request("GET", self._table, params=self._params())
        return resp.json()

    def single(self) -> dict[str, Any]:
        """Exactly one row expected; NotFoundError when there is none."""
        row = self.maybe_single()
        if row is None:
            raise NotFoundError(f"no row in {self._table} matching {self._filters}")
        return row

    def maybe_single(self) -> dict[str, Any] | None:
        if self._limit is None:
            self._limit = 1
        rows = self.execute()
        return rows[0] if rows else None

    def insert(
        self, rows: dict[str, Any] | Sequence[dict[str, Any]], returning: bool = True
    ) -> list[dict[str, Any]]:
        prefer = "return=representation" if returning else "return=minimal"
        resp = self._client.request("POST", self._table, json=rows, headers={"Prefer": prefer})
        return resp.json() if returning and resp.content else []

    def upsert(
        self, rows: dict[str, Any] | Sequence[dict[str, Any]], on_conflict: str | None = None
    ) -> list[dict[str, Any]]:
        params = [("on_conflict", on_conflict)] if on_conflict else None
        resp = self._client.request(
            "POST",
            self._table,
            params=params,
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return resp.json() if resp.content else []

    def update(self, values: dict[str, Any]) -> list[dict[str, Any]]:
        resp = self._client.request(
            "PATCH",
            self._table,
            params=self._params(with_select=False),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return resp.json() if resp.content else []

    def delete(self) -> list[dict[str, Any]]:
        resp = self._client.request(
            "DELETE",
            self._table,
            params=self._params(with_select=False),
            headers={"Prefer": "return=representation"},
        )
        return resp.json() if resp.content else []


class PostgrestClient:
    """
    Synchronous client over httpx.Client.

    Pass transport= (e.g. httpx.MockTransport) to swap the network layer.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url or not api_key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._http = httpx.Client(
            timeout=timeout_sec,
            transport=transport,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.BaseTransport | None = None
    ) -> "PostgrestClient":
        return cls(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout_sec=settings.http_timeout_sec,
            transport=transport,
        )

    @property
    def rest_url(self) -> str:
        return f"{self._base_url}/rest/v1"

    @property
    def storage_url(self) -> str:
        return f"{self._base_url}/storage/v1"

    def table(self, name: str) -> QueryBuilder:
        return QueryBuilder(self, name)

    def request(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return self._send(method, f"{self.rest_url}/{table}", params=params, json=json, headers=headers)

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("remote_transport_failed", method=method, url=url, error=str(e))
            raise RemoteError(f"{method} {url} failed: {e}") from e
        if resp.status_code >= 400:
            logger.warning(
                "remote_request_failed",
                method=method,
                url=url,
                status_code=resp.status_code,
                body=resp.text[:500],
            )
            raise RemoteError(
                f"{method} {url} returned {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> str:
        """Store an object; returns its key (bucket/path)."""
        self._send(
            "POST",
            f"{self.storage_url}/object/{bucket}/{path}",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "true" if upsert else "false"},
        )
        logger.info("storage_object_uploaded", bucket=bucket, path=path, size=len(data))
        return f"{bucket}/{path}"

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.storage_url}/object/public/{bucket}/{path}"

    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        self._send("DELETE", f"{self.storage_url}/object/{bucket}", json={"prefixes": list(paths)})
        logger.info("storage_objects_removed", bucket=bucket, count=len(paths))

    def download(self, url: str) -> bytes:
        """GET an absolute URL (e.g. a public object URL) with the same client."""
        return self._send("GET", url).content

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "PostgrestClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
