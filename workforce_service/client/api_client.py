"""Async HTTP client for the workforce service"""
import httpx
import logging
from typing import Any, Dict, Optional

from shared.constants import MAX_RETRY_ATTEMPTS, TIMEOUT_SHORT
from .result import FetchError, FetchErrorKind, Result

logger = logging.getLogger(__name__)


def _error_from_response(response: httpx.Response, attempts: int) -> FetchError:
    message = f"Request failed with status {response.status_code}"
    error_code = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = str(body["error"].get("message") or message)
        error_code = body["error"].get("code")
    return FetchError(
        FetchErrorKind.HTTP,
        message,
        status_code=response.status_code,
        error_code=error_code,
        attempts=attempts,
    )


class WorkforceClient:
    """
    Thin wrapper over httpx.AsyncClient.
    Every call returns a Result; a timed-out request is retried once and
    then reported, never retried silently beyond that.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = TIMEOUT_SHORT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self.token = token

    async def __aenter__(self) -> "WorkforceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def request(self, method: str, path: str, **kwargs: Any) -> Result[Any]:
        max_attempts = 1 + MAX_RETRY_ATTEMPTS
        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self._client.request(method, path, headers=self._headers(), **kwargs)
            except httpx.TimeoutException as e:
                if attempt < max_attempts:
                    logger.warning(f"Timeout on {method} {path}, retrying once")
                    continue
                logger.error(f"Timeout on {method} {path} after {attempt} attempts: {e}")
                return Result.failure(
                    FetchError(FetchErrorKind.TIMEOUT, "The server did not respond in time", attempts=attempt)
                )
            except httpx.RequestError as e:
                logger.error(f"Connection error on {method} {path}: {e}")
                return Result.failure(
                    FetchError(FetchErrorKind.CONNECTION, f"Could not reach the server: {e}", attempts=attempt)
                )

            if response.status_code >= 400:
                return Result.failure(_error_from_response(response, attempt))
            if response.status_code == 204 or not response.content:
                return Result.success(None)
            try:
                return Result.success(response.json())
            except ValueError:
                return Result.failure(
                    FetchError(
                        FetchErrorKind.INVALID_RESPONSE,
                        "The server returned an unreadable response",
                        status_code=response.status_code,
                        attempts=attempt,
                    )
                )

    # Identity
    async def login(self, email: str, password: str) -> Result[Any]:
        return await self.request("POST", "/api/auth/login", json={"email": email, "password": password})

    async def me(self) -> Result[Any]:
        return await self.request("GET", "/api/auth/me")

    async def logout(self) -> Result[Any]:
        return await self.request("POST", "/api/auth/logout")

    # Roles
    async def get_role_hierarchy(self) -> Result[Any]:
        return await self.request("GET", "/api/roles/hierarchy")

    async def get_available_roles(self) -> Result[Any]:
        return await self.request("GET", "/api/roles/available")

    async def assign_role(self, user_id: int, role_name: str) -> Result[Any]:
        return await self.request("POST", "/api/roles/assign", json={"user_id": user_id, "role_name": role_name})

    # Employees and accounts
    async def search_employees(self, search: Optional[str] = None, limit: int = 20, offset: int = 0) -> Result[Any]:
        params: Dict[str, Any] = {"limit": limit, "offset": offset}
        if search:
            params["search"] = search
        return await self.request("GET", "/api/employees", params=params)

    async def send_invitation(self, employee_id: int, role_name: Optional[str] = None) -> Result[Any]:
        body = {"role_name": role_name} if role_name else None
        return await self.request("POST", f"/api/employees/{employee_id}/invitation", json=body)

    async def preview_activation(self, employee_id: int) -> Result[Any]:
        return await self.request("POST", f"/api/employees/{employee_id}/activation/preview")

    async def activate_account(self, employee_id: int, confirmation_token: Optional[str]) -> Result[Any]:
        return await self.request(
            "POST",
            f"/api/employees/{employee_id}/activation",
            json={"confirmation_token": confirmation_token},
        )

    # Access
    async def check_access(self, path: str) -> Result[Any]:
        return await self.request("GET", "/api/access/check", params={"path": path})

    async def dashboard(self) -> Result[Any]:
        return await self.request("GET", "/api/access/dashboard")
