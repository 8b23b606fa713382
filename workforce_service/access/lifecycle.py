"""Account activation state machine

    no_account -> pending_setup -> active <-> suspended

Each ``plan_*`` function is pure: it takes the current status and returns
the transition to apply, or raises InvalidTransition. Persisting the new
status and firing side effects (mail, audit) is the caller's job, and only
happens when ``Transition.changed`` is true.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AccountStatus(str, Enum):
    NO_ACCOUNT = "no_account"
    PENDING_SETUP = "pending_setup"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class EmploymentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"
    ON_LEAVE = "on_leave"


class ActivationMethod(str, Enum):
    FIRST_LOGIN = "first_login"
    MANUAL = "manual"


class AccountAction(str, Enum):
    INVITE = "invite"
    ACTIVATE = "activate"
    SUSPEND = "suspend"
    REACTIVATE = "reactivate"


class InvalidTransition(Exception):
    def __init__(self, action: AccountAction, current: AccountStatus, message: str):
        super().__init__(message)
        self.action = action
        self.current = current
        self.message = message


@dataclass(frozen=True)
class Transition:
    action: AccountAction
    from_status: AccountStatus
    to_status: AccountStatus
    message: str

    @property
    def changed(self) -> bool:
        return self.from_status is not self.to_status

    @property
    def is_resend(self) -> bool:
        return self.action is AccountAction.INVITE and self.from_status is AccountStatus.PENDING_SETUP


def plan_invitation(current: AccountStatus) -> Transition:
    """Issue (or re-issue) credentials.

    A second invitation while pending re-sends with fresh credentials; the
    status stays ``pending_setup``.
    """
    if current is AccountStatus.NO_ACCOUNT:
        return Transition(AccountAction.INVITE, current, AccountStatus.PENDING_SETUP,
                          "Invitation sent")
    if current is AccountStatus.PENDING_SETUP:
        return Transition(AccountAction.INVITE, current, AccountStatus.PENDING_SETUP,
                          "Invitation re-sent with new temporary credentials")
    raise InvalidTransition(
        AccountAction.INVITE, current,
        f"Cannot send an invitation to an account that is {current.value}",
    )


def plan_activation(current: AccountStatus) -> Transition:
    if current is AccountStatus.ACTIVE:
        return Transition(AccountAction.ACTIVATE, current, current, "Account is already active")
    if current is AccountStatus.PENDING_SETUP:
        return Transition(AccountAction.ACTIVATE, current, AccountStatus.ACTIVE, "Account activated")
    if current is AccountStatus.NO_ACCOUNT:
        raise InvalidTransition(
            AccountAction.ACTIVATE, current,
            "Cannot activate an employee who has not been invited yet; send an invitation first",
        )
    raise InvalidTransition(
        AccountAction.ACTIVATE, current,
        "Account is suspended; use reactivate instead",
    )


def plan_suspension(current: AccountStatus) -> Transition:
    if current is AccountStatus.SUSPENDED:
        return Transition(AccountAction.SUSPEND, current, current, "Account is already suspended")
    if current is AccountStatus.ACTIVE:
        return Transition(AccountAction.SUSPEND, current, AccountStatus.SUSPENDED, "Account suspended")
    raise InvalidTransition(
        AccountAction.SUSPEND, current,
        f"Only active accounts can be suspended (current status: {current.value})",
    )


def plan_reactivation(current: AccountStatus) -> Transition:
    if current is AccountStatus.ACTIVE:
        return Transition(AccountAction.REACTIVATE, current, current, "Account is already active")
    if current is AccountStatus.SUSPENDED:
        return Transition(AccountAction.REACTIVATE, current, AccountStatus.ACTIVE, "Account reactivated")
    raise InvalidTransition(
        AccountAction.REACTIVATE, current,
        f"Only suspended accounts can be reactivated (current status: {current.value})",
    )


def can_authenticate(current: AccountStatus) -> bool:
    """Whether a password login may proceed. Pending accounts log in only to activate."""
    return current in (AccountStatus.ACTIVE, AccountStatus.PENDING_SETUP)


@dataclass(frozen=True)
class AccountCouplingPolicy:
    """How employment status changes reach the account.

    Only termination touches the account, and only when enabled. Nothing
    ever reactivates an account automatically.
    """
    suspend_on_termination: bool = True

    def account_action_for(
        self,
        old: EmploymentStatus,
        new: EmploymentStatus,
        account_status: AccountStatus,
    ) -> Optional[AccountAction]:
        if not self.suspend_on_termination:
            return None
        if new is EmploymentStatus.TERMINATED and old is not EmploymentStatus.TERMINATED \
                and account_status is AccountStatus.ACTIVE:
            return AccountAction.SUSPEND
        return None
