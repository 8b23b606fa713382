"""API tests for employee records and the account lifecycle."""
from unittest.mock import patch

import httpx
import pytest

from workforce_service.access.lifecycle import AccountStatus
from workforce_service.access.roles import RoleName
from workforce_service.core.config import settings
from workforce_service.services import notification_service

from conftest import PASSWORD, auth_headers, create_account, create_employee


async def invite(client, headers, employee_id, role=RoleName.HR_ADMIN, json=None):
    return await client.post(f"/api/employees/{employee_id}/invitation", headers=headers[role], json=json)


async def invite_and_first_login(client, headers, employee):
    invitation = await invite(client, headers, employee.id)
    password = invitation.json()["temporary_password"]
    login = await client.post("/api/auth/login", json={"email": employee.email, "password": password})
    assert login.status_code == 200
    return login.json()


async def employee_status(client, headers, employee_id):
    response = await client.get(f"/api/employees/{employee_id}", headers=headers[RoleName.HR_ADMIN])
    return response.json()["account_status"]


class TestEmployeeRecords:
    @pytest.mark.asyncio
    async def test_create_employee(self, client, accounts, headers):
        payload = {
            "employee_code": "EMP-100",
            "full_name": "Grace Hopper",
            "email": "Grace@Example.com",
            "department": "Engineering",
            "hire_date": "2024-03-01",
        }
        response = await client.post("/api/employees", json=payload, headers=headers[RoleName.HR_STAFF])

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "grace@example.com"
        assert body["account_status"] == "no_account"
        assert body["employment_status"] == "active"

        duplicate = await client.post("/api/employees", json=payload, headers=headers[RoleName.HR_ADMIN])
        assert duplicate.status_code == 409

    @pytest.mark.asyncio
    async def test_employee_role_cannot_create(self, client, accounts, headers):
        payload = {"employee_code": "EMP-101", "full_name": "X", "email": "x@example.com"}
        response = await client.post("/api/employees", json=payload, headers=headers[RoleName.EMPLOYEE])

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_search_and_paginate(self, client, accounts, headers):
        await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await create_employee("EMP-2", "Alicia Keys", "alicia@example.com", department="Sales")
        await create_employee("EMP-3", "Bob Stone", "bob@example.com")

        response = await client.get("/api/employees", params={"search": "ali"}, headers=headers[RoleName.MANAGER])
        body = response.json()
        assert body["total"] == 2
        assert [e["full_name"] for e in body["items"]] == ["Alice Doe", "Alicia Keys"]

        paged = await client.get("/api/employees", params={"limit": 1, "offset": 1}, headers=headers[RoleName.MANAGER])
        assert paged.json()["total"] == 3
        assert [e["full_name"] for e in paged.json()["items"]] == ["Alicia Keys"]

        by_department = await client.get(
            "/api/employees", params={"department": "Sales"}, headers=headers[RoleName.MANAGER]
        )
        assert by_department.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_missing_employee(self, client, accounts, headers):
        response = await client.get("/api/employees/404", headers=headers[RoleName.MANAGER])

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestInvitation:
    @pytest.mark.asyncio
    async def test_invite_then_first_login_activates(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")

        invitation = await invite(client, headers, employee.id)
        body = invitation.json()
        assert invitation.status_code == 200
        assert body["success"] is True
        assert body["account_status"] == "pending_setup"
        assert body["email_sent"] is False
        assert body["temporary_password"]
        assert await employee_status(client, headers, employee.id) == "pending_setup"

        login = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": body["temporary_password"]}
        )
        assert login.status_code == 200
        assert login.json()["activated"] is True
        assert login.json()["must_change_password"] is True
        assert login.json()["user"]["activation_method"] == "first_login"
        assert await employee_status(client, headers, employee.id) == "active"

    @pytest.mark.asyncio
    async def test_reinvite_while_pending_resends(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        first = (await invite(client, headers, employee.id)).json()

        second = await invite(client, headers, employee.id)
        assert second.status_code == 200
        assert second.json()["changed"] is False
        assert "re-sent" in second.json()["message"]
        assert second.json()["temporary_password"] != first["temporary_password"]

        old = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": first["temporary_password"]}
        )
        assert old.status_code == 401

    @pytest.mark.asyncio
    async def test_invite_on_active_account_rejected(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite_and_first_login(client, headers, employee)

        response = await invite(client, headers, employee.id)
        assert response.status_code == 409
        assert response.json()["error"]["current_state"] == "active"

    @pytest.mark.asyncio
    async def test_invite_with_role_above_own_level(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")

        response = await invite(client, headers, employee.id, role=RoleName.HR_STAFF, json={"role_name": "hr-admin"})
        assert response.status_code == 403

        allowed = await invite(client, headers, employee.id, role=RoleName.HR_STAFF, json={"role_name": "hr-staff"})
        assert allowed.status_code == 200

    @pytest.mark.asyncio
    async def test_resend_for_higher_role_refused(self, client, accounts, headers):
        employee = await create_employee("EMP-9", "Hera Admin", "hera@example.com")
        first = await invite(client, headers, employee.id, role=RoleName.SUPER_ADMIN, json={"role_name": "hr-admin"})
        password = first.json()["temporary_password"]

        resend = await invite(client, headers, employee.id, role=RoleName.MANAGER)
        assert resend.status_code == 403
        assert "temporary_password" not in resend.json()

        # The credentials issued by the super admin are untouched
        login = await client.post("/api/auth/login", json={"email": "hera@example.com", "password": password})
        assert login.status_code == 200
        assert login.json()["user"]["role"] == "hr-admin"

    @pytest.mark.asyncio
    async def test_resend_at_same_level_allowed(self, client, accounts, headers):
        employee = await create_employee("EMP-9", "Hera Staff", "hera@example.com")
        await invite(client, headers, employee.id, json={"role_name": "hr-staff"})

        resend = await invite(client, headers, employee.id, role=RoleName.HR_STAFF)
        assert resend.status_code == 200
        assert resend.json()["changed"] is False

    @pytest.mark.asyncio
    async def test_delivered_invitation_hides_password(self, client, accounts, headers, monkeypatch):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        monkeypatch.setattr(settings, "email_delivery_enabled", True)
        sent = []

        def handler(request):
            sent.append(request)
            return httpx.Response(200, json={"queued": True})

        real_client = httpx.AsyncClient
        with patch.object(
            notification_service.httpx, "AsyncClient",
            side_effect=lambda *a, **kw: real_client(transport=httpx.MockTransport(handler)),
        ):
            response = await invite(client, headers, employee.id)

        assert response.json()["email_sent"] is True
        assert response.json()["temporary_password"] is None
        assert len(sent) == 1
        assert sent[0].url.path == "/api/email/send"

    @pytest.mark.asyncio
    async def test_mail_failure_does_not_fail_invitation(self, client, accounts, headers, monkeypatch):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        monkeypatch.setattr(settings, "email_delivery_enabled", True)

        def handler(request):
            raise httpx.ConnectError("email service down", request=request)

        real_client = httpx.AsyncClient
        with patch.object(
            notification_service.httpx, "AsyncClient",
            side_effect=lambda *a, **kw: real_client(transport=httpx.MockTransport(handler)),
        ):
            response = await invite(client, headers, employee.id)

        assert response.status_code == 200
        assert response.json()["account_status"] == "pending_setup"
        assert response.json()["email_sent"] is False
        assert response.json()["temporary_password"]


class TestManualActivation:
    @pytest.mark.asyncio
    async def test_two_step_activation(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite(client, headers, employee.id)

        preview = await client.post(
            f"/api/employees/{employee.id}/activation/preview", headers=headers[RoleName.HR_ADMIN]
        )
        assert preview.status_code == 200
        assert preview.json()["account_status"] == "pending_setup"
        assert preview.json()["consequences"]
        token = preview.json()["confirmation_token"]

        activated = await client.post(
            f"/api/employees/{employee.id}/activation",
            json={"confirmation_token": token},
            headers=headers[RoleName.HR_ADMIN],
        )
        assert activated.status_code == 200
        assert activated.json() == {
            "success": True,
            "message": "Account activated",
            "account_status": "active",
            "changed": True,
        }

        logs = await client.get(f"/api/employees/{employee.id}/audit-logs", headers=headers[RoleName.HR_ADMIN])
        activation = next(log for log in logs.json() if log["action"] == "account.activate")
        assert activation["actor_account_id"] == accounts[RoleName.HR_ADMIN].id
        assert activation["new_values"]["activation_method"] == "manual"

    @pytest.mark.asyncio
    async def test_activate_active_is_noop(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite_and_first_login(client, headers, employee)

        logs_before = await client.get(f"/api/employees/{employee.id}/audit-logs", headers=headers[RoleName.HR_ADMIN])
        response = await client.post(f"/api/employees/{employee.id}/activation", headers=headers[RoleName.HR_ADMIN])
        logs_after = await client.get(f"/api/employees/{employee.id}/audit-logs", headers=headers[RoleName.HR_ADMIN])

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["changed"] is False
        assert len(logs_after.json()) == len(logs_before.json())

    @pytest.mark.asyncio
    async def test_activate_without_invitation_rejected(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")

        response = await client.post(f"/api/employees/{employee.id}/activation", headers=headers[RoleName.SUPER_ADMIN])

        assert response.status_code == 409
        assert response.json()["error"]["current_state"] == "no_account"
        assert await employee_status(client, headers, employee.id) == "no_account"

    @pytest.mark.asyncio
    async def test_activation_requires_confirmation(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite(client, headers, employee.id)

        response = await client.post(f"/api/employees/{employee.id}/activation", headers=headers[RoleName.HR_ADMIN])

        assert response.status_code == 400
        assert await employee_status(client, headers, employee.id) == "pending_setup"

    @pytest.mark.asyncio
    async def test_token_bound_to_actor(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite(client, headers, employee.id)
        preview = await client.post(
            f"/api/employees/{employee.id}/activation/preview", headers=headers[RoleName.HR_ADMIN]
        )

        response = await client.post(
            f"/api/employees/{employee.id}/activation",
            json={"confirmation_token": preview.json()["confirmation_token"]},
            headers=headers[RoleName.SUPER_ADMIN],
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_needs_account_management_permission(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite(client, headers, employee.id)

        response = await client.post(
            f"/api/employees/{employee.id}/activation/preview", headers=headers[RoleName.HR_STAFF]
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_cannot_activate_higher_role(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Sam Root", "sam@example.com")
        await invite(client, headers, employee.id, role=RoleName.SUPER_ADMIN, json={"role_name": "super-admin"})

        preview = await client.post(
            f"/api/employees/{employee.id}/activation/preview", headers=headers[RoleName.HR_ADMIN]
        )
        assert preview.status_code == 403
        assert preview.json()["error"]["your_role"] == "hr-admin"

        activation = await client.post(
            f"/api/employees/{employee.id}/activation",
            json={"confirmation_token": "anything"},
            headers=headers[RoleName.HR_ADMIN],
        )
        assert activation.status_code == 403
        assert await employee_status(client, headers, employee.id) == "pending_setup"


class TestSuspension:
    @pytest.mark.asyncio
    async def test_suspend_and_reactivate(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite_and_first_login(client, headers, employee)

        suspended = await client.post(f"/api/employees/{employee.id}/suspend", headers=headers[RoleName.HR_ADMIN])
        assert suspended.json()["account_status"] == "suspended"

        again = await client.post(f"/api/employees/{employee.id}/activation", headers=headers[RoleName.HR_ADMIN])
        assert again.status_code == 409

        reactivated = await client.post(
            f"/api/employees/{employee.id}/reactivate", headers=headers[RoleName.HR_ADMIN]
        )
        assert reactivated.json()["account_status"] == "active"
        assert reactivated.json()["changed"] is True

    @pytest.mark.asyncio
    async def test_cannot_suspend_pending_account(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite(client, headers, employee.id)

        response = await client.post(f"/api/employees/{employee.id}/suspend", headers=headers[RoleName.HR_ADMIN])
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_cannot_suspend_higher_role(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Sam Root", "sam@example.com")
        boss = await create_account("boss@example.com", RoleName.SUPER_ADMIN, employee_id=employee.id)

        response = await client.post(f"/api/employees/{employee.id}/suspend", headers=headers[RoleName.HR_ADMIN])
        assert response.status_code == 403

        me = await client.get("/api/auth/me", headers=auth_headers(boss))
        assert me.status_code == 200
        assert await employee_status(client, headers, employee.id) == "active"

    @pytest.mark.asyncio
    async def test_cannot_reactivate_higher_role(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Sam Root", "sam@example.com")
        await create_account(
            "boss@example.com", RoleName.SUPER_ADMIN, status=AccountStatus.SUSPENDED, employee_id=employee.id
        )

        response = await client.post(f"/api/employees/{employee.id}/reactivate", headers=headers[RoleName.HR_ADMIN])
        assert response.status_code == 403
        assert await employee_status(client, headers, employee.id) == "suspended"

        login = await client.post("/api/auth/login", json={"email": "boss@example.com", "password": PASSWORD})
        assert login.status_code == 403


class TestEmploymentCoupling:
    @pytest.mark.asyncio
    async def test_termination_suspends_account(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite_and_first_login(client, headers, employee)

        response = await client.patch(
            f"/api/employees/{employee.id}/employment-status",
            json={"employment_status": "terminated"},
            headers=headers[RoleName.HR_ADMIN],
        )

        assert response.status_code == 200
        assert response.json()["account_action"] == "suspend"
        assert response.json()["employee"]["account_status"] == "suspended"

        reinstated = await client.patch(
            f"/api/employees/{employee.id}/employment-status",
            json={"employment_status": "active"},
            headers=headers[RoleName.HR_ADMIN],
        )
        assert reinstated.json()["account_action"] is None
        assert reinstated.json()["employee"]["account_status"] == "suspended"

    @pytest.mark.asyncio
    async def test_termination_leaves_account_when_disabled(self, client, accounts, headers, monkeypatch):
        monkeypatch.setattr(settings, "SUSPEND_ACCOUNT_ON_TERMINATION", False)
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite_and_first_login(client, headers, employee)

        response = await client.patch(
            f"/api/employees/{employee.id}/employment-status",
            json={"employment_status": "terminated"},
            headers=headers[RoleName.HR_ADMIN],
        )

        assert response.json()["account_action"] is None
        assert response.json()["employee"]["employment_status"] == "terminated"
        assert response.json()["employee"]["account_status"] == "active"

    @pytest.mark.asyncio
    async def test_leave_does_not_touch_account(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Alice Doe", "alice@example.com")
        await invite_and_first_login(client, headers, employee)

        response = await client.patch(
            f"/api/employees/{employee.id}/employment-status",
            json={"employment_status": "on_leave"},
            headers=headers[RoleName.MANAGER],
        )
        assert response.json()["employee"]["account_status"] == "active"

    @pytest.mark.asyncio
    async def test_termination_cannot_suspend_higher_role(self, client, accounts, headers):
        employee = await create_employee("EMP-1", "Hera Admin", "hera@example.com")
        await create_account("hera-account@example.com", RoleName.HR_ADMIN, employee_id=employee.id)

        response = await client.patch(
            f"/api/employees/{employee.id}/employment-status",
            json={"employment_status": "terminated"},
            headers=headers[RoleName.MANAGER],
        )
        assert response.status_code == 403

        record = await client.get(f"/api/employees/{employee.id}", headers=headers[RoleName.HR_ADMIN])
        assert record.json()["employment_status"] == "active"
        assert record.json()["account_status"] == "active"
