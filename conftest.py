"""Shared fixtures: an in-memory stand-in for the hosted data service."""

import itertools
import threading
from typing import Any, Dict, List, Mapping, Optional

import pytest

from shop.exceptions import AuthError, RemoteStoreError
from shop.fallback import FallbackStore
from shop.remote import AuthSession, AuthUser
from shop.state import ShopStore

TABLE_KEYS = {
    "products": "id",
    "collections": "name",
    "categories": "name",
    "materials": "name",
    "site_config": "id",
}


def _matches(row: Mapping[str, Any], filters: Optional[Mapping[str, Any]], exclude: Optional[Mapping[str, Any]]) -> bool:
    for column, value in (filters or {}).items():
        if str(row.get(column)) != str(value):
            return False
    for column, value in (exclude or {}).items():
        if str(row.get(column)) == str(value):
            return False
    return True


class FakeRemoteStore:
    """Dict-backed tables with the same methods as ``RemoteStoreClient``.

    Failure injection:
        fail_on: {(method, table)} pairs that raise ``RemoteStoreError``.
        fail_keys: row keys (product ids, names) whose writes raise.
        fail_all: every call raises, reads included.
    """

    url = "http://fake.local"

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in TABLE_KEYS}
        self.calls: List[tuple] = []
        self.fail_on: set = set()
        self.fail_keys: set = set()
        self.fail_all = False
        self.closed = False
        self._clock = itertools.count(1)
        self._lock = threading.Lock()

    def _check(self, method: str, table: str, keys: tuple = ()) -> None:
        self.calls.append((method, table))
        if self.fail_all or (method, table) in self.fail_on:
            raise RemoteStoreError(f"{method} {table} failed", status_code=500, detail="injected")
        if method != "select" and any(str(k) in self.fail_keys for k in keys):
            raise RemoteStoreError(f"{method} {table} failed", status_code=500, detail="injected")

    @staticmethod
    def _as_list(rows: Any) -> List[Dict[str, Any]]:
        return [dict(rows)] if isinstance(rows, Mapping) else [dict(r) for r in rows]

    def writes(self) -> List[tuple]:
        return [call for call in self.calls if call[0] != "select"]

    def seed(self, table: str, rows: List[Dict[str, Any]]) -> None:
        for row in rows:
            row = dict(row)
            row.setdefault("created_at", next(self._clock))
            self.tables[table].append(row)

    def select(self, table, *, order=None, descending=False, filters=None, limit=None):
        with self._lock:
            self._check("select", table)
            rows = [dict(r) for r in self.tables[table] if _matches(r, filters, None)]
        if order:
            rows.sort(key=lambda r: r.get(order) or 0, reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, table, rows):
        rows = self._as_list(rows)
        key = TABLE_KEYS[table]
        with self._lock:
            self._check("insert", table, tuple(r.get(key) for r in rows))
            existing = {r.get(key) for r in self.tables[table]}
            if any(r.get(key) in existing for r in rows):
                raise RemoteStoreError("duplicate key", status_code=409, detail="duplicate key value")
            for row in rows:
                row.setdefault("created_at", next(self._clock))
                self.tables[table].append(row)

    def upsert(self, table, rows, on_conflict=None):
        rows = self._as_list(rows)
        key = on_conflict or TABLE_KEYS[table]
        with self._lock:
            self._check("upsert", table, tuple(r.get(key) for r in rows))
            for row in rows:
                for current in self.tables[table]:
                    if str(current.get(key)) == str(row.get(key)):
                        current.update(row)
                        break
                else:
                    row.setdefault("created_at", next(self._clock))
                    self.tables[table].append(row)

    def update(self, table, values, filters):
        with self._lock:
            self._check("update", table, tuple(filters.values()))
            for row in self.tables[table]:
                if _matches(row, filters, None):
                    row.update(values)

    def delete(self, table, filters=None, exclude=None):
        with self._lock:
            self._check("delete", table, tuple((filters or {}).values()))
            self.tables[table] = [r for r in self.tables[table] if not _matches(r, filters, exclude)]

    def close(self) -> None:
        self.closed = True


class FakeAuthClient:
    """Password table plus issued tokens."""

    def __init__(self, users: Optional[Dict[str, str]] = None) -> None:
        self.users = dict(users or {})
        self.tokens: Dict[str, str] = {}
        self.signed_out: List[str] = []

    def sign_in(self, email: str, password: str) -> AuthSession:
        if self.users.get(email) != password:
            raise AuthError("Invalid login credentials")
        token = f"token-{email}"
        self.tokens[token] = email
        return AuthSession(access_token=token, user=AuthUser(id=email, email=email))

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        email = self.tokens.get(access_token)
        return AuthUser(id=email, email=email) if email else None

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)
        self.tokens.pop(access_token, None)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_remote():
    return FakeRemoteStore()


@pytest.fixture
def fallback(tmp_path):
    return FallbackStore(str(tmp_path / "fallback.db"))


@pytest.fixture
def store(fake_remote, fallback):
    """A store loaded from an empty remote, so it holds the seeded defaults."""
    shop_store = ShopStore(fake_remote, fallback=fallback, max_workers=3)
    shop_store.load()
    fake_remote.calls.clear()
    return shop_store


@pytest.fixture
def fake_auth():
    return FakeAuthClient(
        {
            "admin@example.com": "secret",
            "visitor@example.com": "hunter2",
        }
    )
