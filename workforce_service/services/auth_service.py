from sqlalchemy import select
from datetime import datetime, timezone
from typing import Optional
from ..schemas import AccountOut, AuthResponse, LoginRequest, LogoutResponse
from ..core.config import settings
from ..core.database import AsyncSessionLocal
from ..core.security import generate_jwt_token, hash_password, verify_jwt_token, verify_password
from ..models import Account
from ..access.lifecycle import AccountStatus, ActivationMethod, can_authenticate, plan_activation
from ..access.roles import RoleName
from .audit_service import AUTH_LOGIN, AUTH_LOGIN_FAILED, AUTH_LOGIN_REFUSED, record_audit
from .role_service import get_role_by_name
from shared.exceptions import AccountStatusError, AuthenticationError, ValidationError
import logging

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def account_out(account: Account) -> AccountOut:
    return AccountOut(
        id=account.id,
        email=account.email,
        full_name=account.full_name,
        role=account.role_name,
        account_status=account.account_status,
        is_temporary_password=account.is_temporary_password,
        employee_id=account.employee_id,
        activated_at=account.activated_at,
        activation_method=account.activation_method,
    )


class AuthService:
    """
    Identity provider for the workforce portal.
    Handles password login (including first-login activation), token
    resolution and password changes.
    """

    async def login(self, payload: LoginRequest) -> AuthResponse:
        email = payload.email.lower().strip()
        async with AsyncSessionLocal() as session:
            result = await session.execute(
                select(Account).where(Account.email == email)
            )
            account = result.scalar_one_or_none()
            if not account or not account.password_hash:
                reason = "unknown_email" if not account else "no_credentials"
                await self._record_login_failure(session, email, account, reason)
                raise AuthenticationError(INVALID_CREDENTIALS)
            if not verify_password(payload.password, account.password_hash):
                await self._record_login_failure(session, email, account, "wrong_password")
                raise AuthenticationError(INVALID_CREDENTIALS)
            if not can_authenticate(account.account_status):
                logger.info(f"Login refused for account {account.id}: status {account.account_status.value}")
                record_audit(
                    session, account.id, AUTH_LOGIN_REFUSED, "account", account.id,
                    new_values={"email": email, "account_status": account.account_status.value},
                )
                await session.commit()
                raise AccountStatusError(
                    account.account_status.value,
                    "Your account is suspended. Please contact your administrator.",
                )

            now = datetime.now(timezone.utc)
            activated = False
            if account.account_status is AccountStatus.PENDING_SETUP:
                # First login with the issued credentials completes setup
                transition = plan_activation(account.account_status)
                account.account_status = transition.to_status
                account.activated_at = now
                account.activated_by_account_id = account.id
                account.activation_method = ActivationMethod.FIRST_LOGIN
                record_audit(
                    session,
                    account.id,
                    "account.activate",
                    "account",
                    account.id,
                    old_values={"account_status": transition.from_status.value},
                    new_values={
                        "account_status": transition.to_status.value,
                        "activation_method": ActivationMethod.FIRST_LOGIN.value,
                    },
                )
                activated = True
                logger.info(f"Account {account.id} activated by first login")

            account.last_login_at = now
            record_audit(
                session, account.id, AUTH_LOGIN, "account", account.id,
                new_values={"email": email, "first_login": activated},
            )
            await session.commit()

            token = generate_jwt_token(account.id, account.email, account.role_name)
            return AuthResponse(
                user=account_out(account),
                token=token,
                must_change_password=account.is_temporary_password,
                activated=activated,
            )

    async def _record_login_failure(self, session, email: str, account: Optional[Account], reason: str) -> None:
        logger.warning(f"Failed login for {email}: {reason}")
        record_audit(
            session, None, AUTH_LOGIN_FAILED, "account", account.id if account else None,
            new_values={"email": email, "reason": reason},
        )
        await session.commit()

    async def get_current_user(self, token: str) -> Account:
        """Resolve a bearer token to its account, reloading role and status from the database"""
        try:
            payload = verify_jwt_token(token)
            account_id = int(payload["sub"])
        except (ValueError, KeyError) as e:
            raise AuthenticationError(str(e) or "Invalid authentication token")

        async with AsyncSessionLocal() as session:
            account = await session.get(Account, account_id)
        if not account:
            raise AuthenticationError("Invalid authentication token")
        if account.account_status is not AccountStatus.ACTIVE:
            raise AccountStatusError(account.account_status.value)
        return account

    def logout(self) -> LogoutResponse:
        # Tokens are stateless; the client drops its copy
        return LogoutResponse(success=True, message="Logged out successfully")

    async def change_password(self, account: Account, current_password: str, new_password: str) -> Account:
        if not verify_password(current_password, account.password_hash):
            raise AuthenticationError("Current password is incorrect")
        if current_password == new_password:
            raise ValidationError("New password must differ from the current password")

        async with AsyncSessionLocal() as session:
            stored = await session.get(Account, account.id)
            was_temporary = stored.is_temporary_password
            stored.password_hash = hash_password(new_password)
            stored.is_temporary_password = False
            record_audit(
                session,
                account.id,
                "account.password_change",
                "account",
                account.id,
                old_values={"is_temporary_password": was_temporary},
                new_values={"is_temporary_password": False},
            )
            await session.commit()
            return stored

    async def ensure_bootstrap_admin(self) -> Optional[Account]:
        """Create the first super admin from settings when no such account exists yet"""
        email = settings.bootstrap_admin_email.lower().strip()
        if not email or not settings.bootstrap_admin_password:
            return None

        async with AsyncSessionLocal() as session:
            result = await session.execute(select(Account).where(Account.email == email))
            existing = result.scalar_one_or_none()
            if existing:
                return existing

            role = await get_role_by_name(session, RoleName.SUPER_ADMIN)
            account = Account(
                email=email,
                full_name="Administrator",
                password_hash=hash_password(settings.bootstrap_admin_password),
                role_id=role.id,
                role=role,
                account_status=AccountStatus.ACTIVE,
                is_temporary_password=False,
                activated_at=datetime.now(timezone.utc),
                activation_method=ActivationMethod.MANUAL,
            )
            session.add(account)
            await session.flush()
            record_audit(
                session, None, "account.bootstrap", "account", account.id,
                new_values={"email": email, "role": RoleName.SUPER_ADMIN.value},
            )
            await session.commit()
            logger.info(f"Bootstrap super admin {email} created")
            return account


auth_service = AuthService()
