"""Tests for the account activation state machine and the coupling policy."""
import pytest

from workforce_service.access.lifecycle import (
    AccountAction,
    AccountCouplingPolicy,
    AccountStatus,
    EmploymentStatus,
    InvalidTransition,
    can_authenticate,
    plan_activation,
    plan_invitation,
    plan_reactivation,
    plan_suspension,
)


class TestInvitation:
    def test_first_invitation_moves_to_pending(self):
        transition = plan_invitation(AccountStatus.NO_ACCOUNT)
        assert transition.to_status is AccountStatus.PENDING_SETUP
        assert transition.changed
        assert not transition.is_resend

    def test_reinvite_while_pending_resends(self):
        transition = plan_invitation(AccountStatus.PENDING_SETUP)
        assert transition.to_status is AccountStatus.PENDING_SETUP
        assert transition.is_resend
        assert "re-sent" in transition.message

    @pytest.mark.parametrize("status", [AccountStatus.ACTIVE, AccountStatus.SUSPENDED])
    def test_invite_on_existing_account_rejected(self, status):
        with pytest.raises(InvalidTransition):
            plan_invitation(status)


class TestActivation:
    def test_pending_becomes_active(self):
        transition = plan_activation(AccountStatus.PENDING_SETUP)
        assert transition.to_status is AccountStatus.ACTIVE
        assert transition.changed

    def test_active_is_noop(self):
        transition = plan_activation(AccountStatus.ACTIVE)
        assert transition.to_status is AccountStatus.ACTIVE
        assert not transition.changed

    def test_no_account_cannot_leapfrog(self):
        with pytest.raises(InvalidTransition) as exc_info:
            plan_activation(AccountStatus.NO_ACCOUNT)
        assert exc_info.value.current is AccountStatus.NO_ACCOUNT
        assert "invitation" in exc_info.value.message

    def test_suspended_needs_reactivate(self):
        with pytest.raises(InvalidTransition, match="reactivate"):
            plan_activation(AccountStatus.SUSPENDED)


class TestSuspension:
    def test_suspend_and_reactivate_round_trip(self):
        suspended = plan_suspension(AccountStatus.ACTIVE)
        assert suspended.to_status is AccountStatus.SUSPENDED
        reactivated = plan_reactivation(suspended.to_status)
        assert reactivated.to_status is AccountStatus.ACTIVE

    def test_repeats_are_noops(self):
        assert not plan_suspension(AccountStatus.SUSPENDED).changed
        assert not plan_reactivation(AccountStatus.ACTIVE).changed

    @pytest.mark.parametrize("status", [AccountStatus.NO_ACCOUNT, AccountStatus.PENDING_SETUP])
    def test_only_live_accounts(self, status):
        with pytest.raises(InvalidTransition):
            plan_suspension(status)
        with pytest.raises(InvalidTransition):
            plan_reactivation(status)

    def test_who_can_sign_in(self):
        assert can_authenticate(AccountStatus.ACTIVE)
        assert can_authenticate(AccountStatus.PENDING_SETUP)
        assert not can_authenticate(AccountStatus.SUSPENDED)
        assert not can_authenticate(AccountStatus.NO_ACCOUNT)


class TestCouplingPolicy:
    def test_termination_suspends_active_account(self):
        policy = AccountCouplingPolicy(suspend_on_termination=True)
        action = policy.account_action_for(EmploymentStatus.ACTIVE, EmploymentStatus.TERMINATED, AccountStatus.ACTIVE)
        assert action is AccountAction.SUSPEND

    def test_disabled_policy_leaves_account_alone(self):
        policy = AccountCouplingPolicy(suspend_on_termination=False)
        action = policy.account_action_for(EmploymentStatus.ACTIVE, EmploymentStatus.TERMINATED, AccountStatus.ACTIVE)
        assert action is None

    @pytest.mark.parametrize("new", [EmploymentStatus.INACTIVE, EmploymentStatus.ON_LEAVE, EmploymentStatus.ACTIVE])
    def test_other_transitions_do_nothing(self, new):
        policy = AccountCouplingPolicy()
        assert policy.account_action_for(EmploymentStatus.TERMINATED, new, AccountStatus.SUSPENDED) is None
        assert policy.account_action_for(EmploymentStatus.ACTIVE, new, AccountStatus.ACTIVE) is None

    def test_termination_without_live_account(self):
        policy = AccountCouplingPolicy()
        for status in (AccountStatus.NO_ACCOUNT, AccountStatus.PENDING_SETUP, AccountStatus.SUSPENDED):
            assert policy.account_action_for(EmploymentStatus.ACTIVE, EmploymentStatus.TERMINATED, status) is None
