"""Client-side session with an explicit resolving phase"""
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlsplit
import logging

from ..access.gate import AccessDecision, CurrentUser, RouteNode, SessionState, evaluate_route_access
from ..access.navigation import NAVIGATION
from .api_client import WorkforceClient
from .result import FetchError, Result

logger = logging.getLogger(__name__)

DEFAULT_LANDING = "/dashboard"


def user_from_payload(payload: Dict[str, Any]) -> CurrentUser:
    return CurrentUser(
        id=int(payload["id"]),
        email=payload["email"],
        role=payload.get("role"),
        full_name=payload.get("full_name"),
    )


def next_path_from(redirect_url: str) -> Optional[str]:
    """The return location carried by a login redirect"""
    values = parse_qs(urlsplit(redirect_url).query).get("next")
    return values[0] if values else None


def safe_landing(next_path: Optional[str], default: str = DEFAULT_LANDING) -> str:
    """Only same-site absolute paths are followed after login"""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
        return default
    return next_path


class SessionStore:
    """
    Holds the current session for a client.
    Starts out resolving; bootstrap() settles it as authenticated or
    anonymous. A failed lookup counts as anonymous.
    """

    def __init__(self, client: WorkforceClient, login_path: str = "/login", navigation: RouteNode = NAVIGATION):
        self._client = client
        self._login_path = login_path
        self._navigation = navigation
        self.state = SessionState.resolving()
        self.last_error: Optional[FetchError] = None

    async def bootstrap(self) -> SessionState:
        self.state = SessionState.resolving()
        if not self._client.token:
            self.state = SessionState.anonymous()
            return self.state

        result = await self._client.me()
        if result.ok:
            self.state = SessionState.authenticated(user_from_payload(result.value["user"]))
        else:
            logger.info(f"Session lookup failed, continuing anonymous: {result.error.message}")
            self.last_error = result.error
            self._client.token = None
            self.state = SessionState.anonymous()
        return self.state

    async def login(self, email: str, password: str, next_path: Optional[str] = None) -> Result[str]:
        """Sign in; on success the value is where to go next"""
        result = await self._client.login(email, password)
        if not result.ok:
            self.last_error = result.error
            self.state = SessionState.anonymous()
            return Result.failure(result.error)

        self._client.token = result.value["token"]
        self.state = SessionState.authenticated(user_from_payload(result.value["user"]))
        self.last_error = None
        return Result.success(safe_landing(next_path))

    async def logout(self) -> None:
        if self._client.token:
            result = await self._client.logout()
            if not result.ok:
                logger.warning(f"Logout call failed, dropping the session anyway: {result.error.message}")
        self._client.token = None
        self.state = SessionState.anonymous()

    def gate(self, path: str) -> Optional[AccessDecision]:
        """Access decision for a portal page under the current session"""
        return evaluate_route_access(self._navigation, self.state, path, self._login_path)
