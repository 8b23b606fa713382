"""Account directory - invitations, activation, suspension

Every operation returns a result with a readable message and is safe to
call twice: repeating a request that already took effect reports success
without firing its side effects again.
"""
from sqlalchemy import select
from datetime import datetime, timezone
from typing import Optional
from ..models import Employee, Account
from ..core.database import AsyncSessionLocal
from ..core.security import (
    generate_confirmation_token,
    generate_temporary_password,
    hash_password,
    verify_confirmation_token,
)
from ..schemas import ActivationPreview, InvitationResult, OperationResult
from ..access.lifecycle import (
    AccountStatus,
    ActivationMethod,
    InvalidTransition,
    Transition,
    plan_activation,
    plan_invitation,
    plan_reactivation,
    plan_suspension,
)
from ..access.roles import DEFAULT_ROLE, can_grant_role, get_role_definition, parse_role
from .audit_service import record_audit
from .notification_service import send_invitation_email
from .role_service import get_role_by_name
from shared.constants import ACTIVATION_CONFIRM_PURPOSE
from shared.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
import logging

logger = logging.getLogger(__name__)


def _plan(planner, status: AccountStatus) -> Transition:
    try:
        return planner(status)
    except InvalidTransition as e:
        logger.info(f"Rejected {e.action.value} on account in state {e.current.value}")
        raise ConflictError(e.message, current_state=e.current.value)


def _result(transition: Transition) -> OperationResult:
    return OperationResult(
        success=True,
        message=transition.message,
        account_status=transition.to_status,
        changed=transition.changed,
    )


async def _load_employee(session, employee_id: int) -> Employee:
    employee = await session.get(Employee, employee_id)
    if not employee:
        raise NotFoundError("Employee", employee_id)
    return employee


def ensure_can_manage(actor: Account, account: Optional[Account]) -> None:
    """Refuse to touch an account whose role ranks above the actor's"""
    if account is None:
        return
    if not can_grant_role(actor.role_name, account.role_name):
        logger.warning(f"Account {actor.id} ({actor.role_name}) refused access to account {account.id} ({account.role_name})")
        raise AuthorizationError(
            f"You cannot manage the account of a {account.role_name}",
            actual_role=actor.role_name,
        )


async def send_invitation(actor: Account, employee_id: int, role_name: Optional[str] = None) -> InvitationResult:
    """Create the employee's account with a temporary password and mail it; re-sends while pending"""
    role = None
    if role_name is not None:
        role = parse_role(role_name)
        if role is None:
            raise ValidationError(f"Unknown role: {role_name}")
        if not can_grant_role(actor.role_name, role):
            raise AuthorizationError(f"You cannot assign the role {role.value}", actual_role=actor.role_name)

    temporary_password = generate_temporary_password()
    async with AsyncSessionLocal() as session:
        employee = await _load_employee(session, employee_id)
        transition = _plan(plan_invitation, employee.account_status)
        now = datetime.now(timezone.utc)

        account = employee.account
        ensure_can_manage(actor, account)
        if account is None:
            result = await session.execute(select(Account).where(Account.email == employee.email))
            if result.scalar_one_or_none():
                raise ConflictError("Another account already uses this employee's email")
            role_row = await get_role_by_name(session, role or DEFAULT_ROLE)
            account = Account(
                email=employee.email,
                full_name=employee.full_name,
                role_id=role_row.id,
                role=role_row,
                employee_id=employee.id,
            )
            session.add(account)
        elif role is not None and role.value != account.role_name:
            role_row = await get_role_by_name(session, role)
            account.role_id = role_row.id
            account.role = role_row

        account.account_status = transition.to_status
        account.password_hash = hash_password(temporary_password)
        account.is_temporary_password = True
        account.invitation_sent_at = now
        await session.flush()

        record_audit(
            session, actor.id,
            "account.invite_resend" if transition.is_resend else "account.invite",
            "account", account.id,
            old_values={"account_status": transition.from_status.value},
            new_values={"account_status": transition.to_status.value, "role": account.role_name},
        )
        await session.commit()

        email, full_name = account.email, account.full_name
        role_definition = get_role_definition(account.role_name)

    email_sent = await send_invitation_email(
        email,
        full_name,
        temporary_password,
        role_definition.display_name if role_definition else account.role_name,
    )
    message = transition.message
    if not email_sent:
        message += "; the email was not delivered, share the temporary password with the employee directly"

    return InvitationResult(
        success=True,
        message=message,
        account_status=transition.to_status,
        changed=transition.changed,
        email_sent=email_sent,
        temporary_password=None if email_sent else temporary_password,
    )


async def preview_activation(actor: Account, employee_id: int) -> ActivationPreview:
    """First step of a manual activation: what will happen, plus a token to confirm it"""
    async with AsyncSessionLocal() as session:
        employee = await _load_employee(session, employee_id)
        transition = _plan(plan_activation, employee.account_status)
        ensure_can_manage(actor, employee.account)

    if not transition.changed:
        return ActivationPreview(
            employee_id=employee_id,
            account_status=transition.to_status,
            consequences=["The account is already active; confirming changes nothing."],
        )

    account = employee.account
    consequences = [
        f"{account.email} will be able to sign in without completing first-login setup.",
        f"The activation will be recorded as a manual override by {actor.email}.",
    ]
    if account.is_temporary_password:
        consequences.append("The temporary password stays valid until the employee changes it.")

    token, expires_at = generate_confirmation_token(ACTIVATION_CONFIRM_PURPOSE, employee_id, actor.id)
    return ActivationPreview(
        employee_id=employee_id,
        account_status=transition.from_status,
        consequences=consequences,
        confirmation_token=token,
        expires_at=expires_at,
    )


async def activate_account(actor: Account, employee_id: int, confirmation_token: Optional[str]) -> OperationResult:
    """Second step of a manual activation; a no-op success when the account is already active"""
    async with AsyncSessionLocal() as session:
        employee = await _load_employee(session, employee_id)
        transition = _plan(plan_activation, employee.account_status)
        ensure_can_manage(actor, employee.account)
        if not transition.changed:
            return _result(transition)

        if not confirmation_token:
            raise ValidationError("Manual activation must be confirmed; request a preview first")
        try:
            verify_confirmation_token(confirmation_token, ACTIVATION_CONFIRM_PURPOSE, employee_id, actor.id)
        except ValueError as e:
            raise ValidationError(str(e))

        account = employee.account
        account.account_status = transition.to_status
        account.activated_at = datetime.now(timezone.utc)
        account.activated_by_account_id = actor.id
        account.activation_method = ActivationMethod.MANUAL
        record_audit(
            session, actor.id, "account.activate", "account", account.id,
            old_values={"account_status": transition.from_status.value},
            new_values={
                "account_status": transition.to_status.value,
                "activation_method": ActivationMethod.MANUAL.value,
            },
        )
        await session.commit()

    logger.info(f"Account of employee {employee_id} manually activated by {actor.id}")
    return _result(transition)


async def _administrative_transition(actor: Account, employee_id: int, planner, action: str) -> OperationResult:
    async with AsyncSessionLocal() as session:
        employee = await _load_employee(session, employee_id)
        transition = _plan(planner, employee.account_status)
        account = employee.account
        ensure_can_manage(actor, account)
        if not transition.changed:
            return _result(transition)

        if account.id == actor.id:
            raise ValidationError("You cannot change the status of your own account")

        account.account_status = transition.to_status
        record_audit(
            session, actor.id, action, "account", account.id,
            old_values={"account_status": transition.from_status.value},
            new_values={"account_status": transition.to_status.value},
        )
        await session.commit()

    logger.info(f"{action} applied to employee {employee_id} by {actor.id}")
    return _result(transition)


async def suspend_account(actor: Account, employee_id: int) -> OperationResult:
    return await _administrative_transition(actor, employee_id, plan_suspension, "account.suspend")


async def reactivate_account(actor: Account, employee_id: int) -> OperationResult:
    return await _administrative_transition(actor, employee_id, plan_reactivation, "account.reactivate")
