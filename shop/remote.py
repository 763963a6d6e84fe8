"""HTTP client for the hosted data service.

The service speaks PostgREST for tables (``/rest/v1/<table>``) and GoTrue for
email/password sessions (``/auth/v1``). Only the handful of verbs the shop
needs are wrapped here; every failure surfaces as ``RemoteStoreError`` (or
``AuthError`` for rejected credentials).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import requests  # type: ignore[import-untyped]

from shop.config import REMOTE_TIMEOUT, SUPABASE_ANON_KEY, SUPABASE_SERVICE_KEY, SUPABASE_URL
from shop.exceptions import AuthError, RemoteDataError, RemoteStoreError
from shop.logging_config import get_logger

__all__ = [
    "RemoteStoreClient",
    "AuthClient",
    "AuthSession",
    "AuthUser",
    "create_session",
]

logger = get_logger("remote")

Rows = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


def create_session(api_key: str) -> requests.Session:
    """Create a requests Session carrying the service's API key."""
    session = requests.Session()
    session.headers.update(
        {
            "apikey": api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    )
    return session


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:300]
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)[:300]


class _BaseClient:
    def __init__(
        self,
        url: str = SUPABASE_URL,
        api_key: str = SUPABASE_ANON_KEY,
        service_key: str = SUPABASE_SERVICE_KEY,
        timeout: float = REMOTE_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.url = url.rstrip("/")
        self.api_key = api_key or service_key
        self.service_key = service_key
        self.timeout = timeout
        self._session = session or create_session(self.api_key)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (or None).

        Raises:
            RemoteStoreError: On connection problems, timeouts and non-2xx replies.
        """
        url = f"{self.url}{path}"
        req_headers = {"Authorization": f"Bearer {token or self.service_key or self.api_key}"}
        if headers:
            req_headers.update(headers)

        try:
            resp = self._session.request(
                method, url, params=params, json=json, headers=req_headers, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout calling {method} {path}: {e}")
            raise RemoteStoreError(f"Timeout calling {method} {path}") from e
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error calling {method} {path}: {e}")
            raise RemoteStoreError(f"Could not reach the data service at {self.url}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error calling {method} {path}: {e}")
            raise RemoteStoreError(f"Request to {path} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            detail = _error_detail(resp)
            logger.warning(f"{method} {path} returned {resp.status_code}: {detail}")
            raise RemoteStoreError(
                f"{method} {path} failed with HTTP {resp.status_code}",
                status_code=resp.status_code,
                detail=detail,
            )

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteDataError(f"{method} {path} returned invalid JSON") from e

    def close(self) -> None:
        self._session.close()


class RemoteStoreClient(_BaseClient):
    """Table-scoped reads and writes against the PostgREST endpoint."""

    @staticmethod
    def _filter_params(
        filters: Optional[Mapping[str, Any]] = None,
        exclude: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, str]:
        params: Dict[str, str] = {}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        for column, value in (exclude or {}).items():
            params[column] = f"neq.{value}"
        return params

    def select(
        self,
        table: str,
        *,
        order: Optional[str] = None,
        descending: bool = False,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch rows from a table.

        Args:
            table: Table name.
            order: Column to order by.
            descending: Order direction.
            filters: Column equality filters.
            limit: Maximum number of rows.

        Returns:
            List of row dicts (unvalidated).
        """
        params = {"select": "*"}
        params.update(self._filter_params(filters))
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(int(limit))

        body = self._request("GET", f"/rest/v1/{table}", params=params)
        if body is None:
            return []
        if not isinstance(body, list):
            raise RemoteDataError(f"Expected a list of rows from '{table}', got {type(body).__name__}")
        return body

    def insert(self, table: str, rows: Rows) -> None:
        self._request(
            "POST",
            f"/rest/v1/{table}",
            json=rows,
            headers={"Prefer": "return=minimal"},
        )

    def upsert(self, table: str, rows: Rows, on_conflict: Optional[str] = None) -> None:
        """Insert rows, merging into existing rows with the same key."""
        params = {"on_conflict": on_conflict} if on_conflict else None
        self._request(
            "POST",
            f"/rest/v1/{table}",
            params=params,
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def update(self, table: str, values: Mapping[str, Any], filters: Mapping[str, Any]) -> None:
        if not filters:
            raise ValueError("update() requires at least one filter")
        self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=self._filter_params(filters),
            json=dict(values),
            headers={"Prefer": "return=minimal"},
        )

    def delete(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        exclude: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Delete rows matching ``filters`` (eq) and ``exclude`` (neq).

        PostgREST refuses unfiltered deletes, so wiping a table is spelled
        ``delete(table, exclude={"id": "<impossible value>"})``.
        """
        if not filters and not exclude:
            raise ValueError("delete() requires a filter")
        self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=self._filter_params(filters, exclude),
            headers={"Prefer": "return=minimal"},
        )


@dataclass
class AuthUser:
    id: str
    email: str


@dataclass
class AuthSession:
    access_token: str
    user: AuthUser


def _parse_user(body: Any) -> AuthUser:
    if not isinstance(body, dict) or not isinstance(body.get("email"), str):
        raise RemoteDataError("Auth service returned a user without an email")
    return AuthUser(id=str(body.get("id", "")), email=body["email"])


class AuthClient(_BaseClient):
    """Email/password sessions against the GoTrue endpoint."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for an access token.

        Raises:
            AuthError: If the credentials are rejected.
            RemoteStoreError: If the service cannot be reached.
        """
        try:
            body = self._request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                token=self.api_key,
            )
        except RemoteStoreError as e:
            if e.status_code in (400, 401, 422):
                raise AuthError(e.detail or "Invalid login credentials") from e
            raise

        if not isinstance(body, dict) or not isinstance(body.get("access_token"), str):
            raise RemoteDataError("Auth service returned no access token")
        return AuthSession(access_token=body["access_token"], user=_parse_user(body.get("user")))

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        """Return the user behind a token, or None if the token is no longer valid."""
        try:
            body = self._request("GET", "/auth/v1/user", token=access_token)
        except RemoteStoreError as e:
            if e.status_code in (401, 403):
                return None
            raise
        return _parse_user(body)

    def sign_out(self, access_token: str) -> None:
        try:
            self._request("POST", "/auth/v1/logout", token=access_token)
        except RemoteStoreError as e:
            # An already-expired token is as good as signed out
            if e.status_code not in (401, 403):
                raise

    def create_user(self, email: str, password: str) -> AuthUser:
        """Create a confirmed user (requires the service-role key)."""
        if not self.service_key:
            raise AuthError("SUPABASE_SERVICE_KEY is required to create users")
        body = self._request(
            "POST",
            "/auth/v1/admin/users",
            json={"email": email, "password": password, "email_confirm": True},
            token=self.service_key,
        )
        return _parse_user(body)
