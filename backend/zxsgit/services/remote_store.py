"""HTTP client for the JSON-file REST service."""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

import httpx
from pydantic import ValidationError as SchemaError

from zxsgit.models import Company, Session, Todo, User
from zxsgit.schemas import AdminUserUpdate, CompanyPayload, LoginRequest, RegisterRequest
from zxsgit.utils.exceptions import AppException, NetworkError, ValidationError, error_for_status
from zxsgit.utils.logger import logger

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class RemoteResult(Generic[T]):
    """Result of a remote call; never raised, always returned."""
    ok: bool
    value: Optional[T] = None
    message: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[AppException] = None

    @property
    def unreachable(self) -> bool:
        """True when the caller should fall back to the local store."""
        return not self.ok and isinstance(self.error, NetworkError)

    def map(self, convert: Callable[[T], U]) -> "RemoteResult[U]":
        """Convert the envelope into typed records; malformed data counts as unreachable."""
        if not self.ok:
            return RemoteResult(
                ok=False, message=self.message, status_code=self.status_code, error=self.error
            )
        try:
            value = convert(self.value)
        except (SchemaError, TypeError, KeyError) as e:
            logger.error(f"[REMOTE] Malformed response data: {e}")
            error = NetworkError("Unexpected response from server")
            return RemoteResult(
                ok=False, message=error.message, status_code=self.status_code, error=error
            )
        return RemoteResult(ok=True, value=value, message=self.message, status_code=self.status_code)


class RemoteStoreClient:
    """One coroutine per (entity, verb) pair of the REST service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Ensure URL doesn't have trailing slash
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> RemoteResult[Dict[str, Any]]:
        """
        Perform one call and unwrap the {ok, message, ...data} envelope.

        Args:
            method: HTTP verb
            path: Path under the base URL
            json: Optional request body

        Returns:
            RemoteResult whose value is the envelope without ok/message
        """
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning(f"[REMOTE] {method} {path} failed: {e!r}")
            error = NetworkError()
            return RemoteResult(ok=False, message=error.message, error=error)

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            logger.warning(f"[REMOTE] {method} {path} returned a non-envelope body ({response.status_code})")
            error = NetworkError(f"Unexpected response from server ({response.status_code})")
            return RemoteResult(
                ok=False, message=error.message, status_code=response.status_code, error=error
            )

        message = body.pop("message", None)
        ok = bool(body.pop("ok", False))

        if response.status_code >= 400:
            error = error_for_status(response.status_code, message)
            logger.debug(f"[REMOTE] {method} {path} rejected: {response.status_code} - {error.message}")
            return RemoteResult(
                ok=False, message=error.message, status_code=response.status_code, error=error
            )
        if not ok:
            error = ValidationError(message or "Request rejected by server")
            return RemoteResult(
                ok=False, message=error.message, status_code=response.status_code, error=error
            )

        return RemoteResult(ok=True, value=body, message=message, status_code=response.status_code)

    async def ping(self) -> bool:
        """Check whether the REST service answers."""
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    # ==================== Auth ====================

    async def register(self, request: RegisterRequest) -> RemoteResult[Tuple[Session, Optional[User]]]:
        result = await self._request("POST", "/api/register", json=request.wire())
        return result.map(
            lambda d: (Session(**d["session"]), User(**d["user"]) if d.get("user") else None)
        )

    async def login(self, request: LoginRequest) -> RemoteResult[Session]:
        result = await self._request("POST", "/api/login", json=request.wire())
        return result.map(lambda d: Session(**d["session"]))

    # ==================== Users ====================

    async def list_users(self) -> RemoteResult[List[User]]:
        result = await self._request("GET", "/api/users")
        return result.map(lambda d: [User(**u) for u in d.get("users") or []])

    async def update_user(self, user_id: str, update: AdminUserUpdate) -> RemoteResult[Optional[User]]:
        result = await self._request("PUT", f"/api/users/{user_id}", json=update.wire())
        return result.map(lambda d: User(**d["user"]) if d.get("user") else None)

    async def delete_user(self, user_id: str) -> RemoteResult[None]:
        result = await self._request("DELETE", f"/api/users/{user_id}")
        return result.map(lambda d: None)

    async def sync_users(self, users: List[User]) -> RemoteResult[List[User]]:
        body = {"users": [u.model_dump() for u in users]}
        result = await self._request("POST", "/api/users/sync", json=body)
        return result.map(lambda d: [User(**u) for u in d.get("users") or []])

    # ==================== Todos ====================

    async def list_todos(self) -> RemoteResult[List[Todo]]:
        result = await self._request("GET", "/api/todos")
        return result.map(lambda d: [Todo(**t) for t in d.get("todos") or []])

    async def replace_todos(self, todos: List[Todo]) -> RemoteResult[None]:
        body = {"todos": [t.model_dump() for t in todos]}
        result = await self._request("POST", "/api/todos", json=body)
        return result.map(lambda d: None)

    # ==================== Companies ====================

    async def list_companies(self) -> RemoteResult[List[Company]]:
        result = await self._request("GET", "/api/companies")
        return result.map(lambda d: [Company(**c) for c in d.get("companies") or []])

    async def get_company(self, company_id: str) -> RemoteResult[Company]:
        result = await self._request("GET", f"/api/companies/{company_id}")
        return result.map(lambda d: Company(**d["company"]))

    async def create_company(self, payload: CompanyPayload) -> RemoteResult[Company]:
        result = await self._request("POST", "/api/companies", json=payload.wire())
        return result.map(lambda d: Company(**d["company"]))

    async def update_company(self, company_id: str, payload: CompanyPayload) -> RemoteResult[Company]:
        result = await self._request("PUT", f"/api/companies/{company_id}", json=payload.wire())
        return result.map(lambda d: Company(**d["company"]))

    async def delete_company(self, company_id: str) -> RemoteResult[None]:
        result = await self._request("DELETE", f"/api/companies/{company_id}")
        return result.map(lambda d: None)
