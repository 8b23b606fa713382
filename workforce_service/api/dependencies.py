"""Request identity and role/permission guards"""
from fastapi import Depends, Header, Request
from typing import Optional

from ..core.config import settings
from ..models import Account
from ..services.auth_service import auth_service
from ..access.gate import (
    AccessOutcome,
    CurrentUser,
    SessionState,
    evaluate_access,
    login_redirect,
    normalize_required_roles,
)
from ..access.roles import has_permissions, parse_permission
from shared.exceptions import AccountStatusError, AuthenticationError, AuthorizationError
import logging

logger = logging.getLogger(__name__)


def _bearer_token(authorization: str) -> Optional[str]:
    if not authorization.startswith("Bearer "):
        return None
    token = authorization.replace("Bearer ", "", 1).strip()
    return token or None


def session_state_for(account: Optional[Account]) -> SessionState:
    if account is None:
        return SessionState.anonymous()
    return SessionState.authenticated(
        CurrentUser(id=account.id, email=account.email, role=account.role_name, full_name=account.full_name)
    )


async def get_current_account(request: Request, authorization: str = Header(default="")) -> Account:
    """The signed-in account; 401 with a login link when there is none"""
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationError(
            "Authorization header missing or invalid",
            login_url=login_redirect(request.url.path, settings.LOGIN_PATH),
        )
    return await auth_service.get_current_user(token)


async def get_optional_account(authorization: str = Header(default="")) -> Optional[Account]:
    """Like get_current_account, but an unusable identity counts as anonymous"""
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        return await auth_service.get_current_user(token)
    except (AuthenticationError, AccountStatusError) as e:
        logger.debug(f"Treating request as anonymous: {e.detail}")
        return None


def require_roles(*roles):
    """Dependency admitting only accounts whose role is one of ``roles`` (any account when empty)"""
    required = normalize_required_roles(roles)

    async def dependency(request: Request, account: Account = Depends(get_current_account)) -> Account:
        decision = evaluate_access(session_state_for(account), required, request.url.path, settings.LOGIN_PATH)
        if decision.outcome is AccessOutcome.DENIED:
            raise AuthorizationError(decision.message, decision.required_roles, decision.user_role)
        return account

    return dependency


def require_permissions(*permissions: str, require_any: bool = False):
    """Dependency checking the caller's role against permission tokens"""
    wanted = [parse_permission(p) for p in permissions]

    async def dependency(account: Account = Depends(get_current_account)) -> Account:
        if not has_permissions(account.role_name, wanted, require_any=require_any):
            tokens = ", ".join(str(p) for p in wanted)
            raise AuthorizationError(
                f"Missing permission: {tokens}. Your role: {account.role_name or 'none'}",
                actual_role=account.role_name,
            )
        return account

    return dependency
