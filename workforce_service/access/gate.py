"""Role-based access gate

A gate decides, for the current session and a protected resource, whether
to show the resource, send the caller to login, or show an access-denied
view. While the session is still being resolved it only ever answers
LOADING.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple
from urllib.parse import urlencode
import logging

from .roles import RoleName, parse_role

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    RESOLVING = "resolving"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str
    role: Optional[str]
    full_name: Optional[str] = None


@dataclass(frozen=True)
class SessionState:
    phase: SessionPhase
    user: Optional[CurrentUser] = None

    @classmethod
    def resolving(cls) -> "SessionState":
        return cls(SessionPhase.RESOLVING)

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls(SessionPhase.ANONYMOUS)

    @classmethod
    def authenticated(cls, user: CurrentUser) -> "SessionState":
        return cls(SessionPhase.AUTHENTICATED, user)

    @property
    def is_resolving(self) -> bool:
        return self.phase is SessionPhase.RESOLVING


class AccessOutcome(str, Enum):
    LOADING = "loading"
    REDIRECT = "redirect"
    DENIED = "denied"
    GRANTED = "granted"


@dataclass(frozen=True)
class AccessDecision:
    outcome: AccessOutcome
    redirect_to: Optional[str] = None
    required_roles: Tuple[str, ...] = ()
    user_role: Optional[str] = None
    message: Optional[str] = None

    @property
    def granted(self) -> bool:
        return self.outcome is AccessOutcome.GRANTED


def login_redirect(requested_path: str, login_path: str = "/login") -> str:
    """Login entry point that returns the user to ``requested_path`` afterwards"""
    if not requested_path or requested_path == login_path:
        return login_path
    return f"{login_path}?{urlencode({'next': requested_path})}"


def denial_message(required_roles: Iterable[str], user_role: Optional[str]) -> str:
    return (
        f"Access denied. Required roles: {', '.join(required_roles)}. "
        f"Your role: {user_role or 'none'}"
    )


def normalize_required_roles(roles: Iterable[object]) -> FrozenSet[RoleName]:
    normalized = set()
    for role in roles:
        parsed = role if isinstance(role, RoleName) else parse_role(str(role))
        if parsed is None:
            raise ValueError(f"Unknown role in access requirement: {role!r}")
        normalized.add(parsed)
    return frozenset(normalized)


def _ordered(roles: Iterable[RoleName]) -> Tuple[str, ...]:
    order = list(RoleName)
    return tuple(r.value for r in sorted(roles, key=order.index))


def evaluate_access(
    session: SessionState,
    required_roles: Iterable[object] = (),
    requested_path: str = "/",
    login_path: str = "/login",
) -> AccessDecision:
    """Decide access for one gate. An empty ``required_roles`` admits any authenticated user."""
    if session.is_resolving:
        return AccessDecision(AccessOutcome.LOADING)

    if session.phase is SessionPhase.ANONYMOUS or session.user is None:
        return AccessDecision(
            AccessOutcome.REDIRECT,
            redirect_to=login_redirect(requested_path, login_path),
        )

    required = normalize_required_roles(required_roles)
    user_role = session.user.role
    if not required:
        return AccessDecision(AccessOutcome.GRANTED, user_role=user_role)

    parsed_role = parse_role(user_role)
    if parsed_role is not None and parsed_role in required:
        return AccessDecision(AccessOutcome.GRANTED, user_role=user_role)

    ordered = _ordered(required)
    logger.info(f"Access denied to {requested_path}: role {user_role!r} not in {list(ordered)}")
    return AccessDecision(
        AccessOutcome.DENIED,
        required_roles=ordered,
        user_role=user_role,
        message=denial_message(ordered, user_role),
    )


@dataclass
class RouteNode:
    """One level of the navigation tree.

    ``required_roles`` applies to this node and everything below it. A child
    only lists roles when it needs to narrow its parent's check.
    """
    segment: str
    required_roles: FrozenSet[RoleName] = frozenset()
    public: bool = False
    children: List["RouteNode"] = field(default_factory=list)

    def child(self, segment: str) -> Optional["RouteNode"]:
        for node in self.children:
            if node.segment == segment:
                return node
        for node in self.children:
            if node.segment.startswith(":"):
                return node
        return None


def route(segment: str, roles: Iterable[object] = (), public: bool = False,
          children: Optional[List[RouteNode]] = None) -> RouteNode:
    return RouteNode(
        segment=segment,
        required_roles=normalize_required_roles(roles),
        public=public,
        children=children or [],
    )


@dataclass(frozen=True)
class ResolvedRoute:
    matched: bool
    public: bool
    checks: Tuple[FrozenSet[RoleName], ...]


def resolve_route(root: RouteNode, path: str) -> ResolvedRoute:
    """Walk ``path`` down the tree collecting the role check of every level"""
    segments = [s for s in path.split("?", 1)[0].split("/") if s]
    checks: List[FrozenSet[RoleName]] = [root.required_roles]
    node = root
    for segment in segments:
        nxt = node.child(segment)
        if nxt is None:
            return ResolvedRoute(False, False, tuple(checks))
        node = nxt
        checks.append(node.required_roles)
    return ResolvedRoute(True, node.public, tuple(checks))


def evaluate_route_access(
    root: RouteNode,
    session: SessionState,
    path: str,
    login_path: str = "/login",
) -> Optional[AccessDecision]:
    """Run every gate from the root down to ``path``; the first non-granted decision wins.

    Returns None for paths that are not in the tree.
    """
    resolved = resolve_route(root, path)
    if not resolved.matched:
        return None
    if resolved.public:
        if session.is_resolving:
            return AccessDecision(AccessOutcome.LOADING)
        user_role = session.user.role if session.user else None
        return AccessDecision(AccessOutcome.GRANTED, user_role=user_role)

    decision = evaluate_access(session, (), path, login_path)
    for required in resolved.checks:
        if not decision.granted:
            break
        decision = evaluate_access(session, required, path, login_path)
    return decision
