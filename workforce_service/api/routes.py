from fastapi import APIRouter, Depends, Query
from typing import Optional, List, Dict
import logging

logger = logging.getLogger(__name__)
from ..schemas import (
    AccessCheckResponse,
    ActivationConfirm,
    ActivationPreview,
    AssignRoleRequest,
    AssignRoleResponse,
    AuditLogOut,
    AuthResponse,
    ChangePasswordRequest,
    DashboardResponse,
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeOut,
    EmploymentStatusResponse,
    EmploymentStatusUpdate,
    InvitationRequest,
    InvitationResult,
    LoginRequest,
    LogoutResponse,
    MeResponse,
    MyRoleResponse,
    OperationResult,
    PermissionOut,
    RoleHierarchyResponse,
    RoleOut,
)
from ..services.auth_service import auth_service, account_out
from ..services import role_service, employee_service, account_service
from ..services.audit_service import get_auth_logs, get_employee_audit_logs
from ..access.gate import evaluate_route_access
from ..access.navigation import NAVIGATION
from ..access.dashboards import select_dashboard
from ..access.lifecycle import EmploymentStatus
from ..access.roles import RoleName, get_role_definition, permission_catalog
from ..models import Account
from ..core.config import settings
from .dependencies import (
    get_current_account,
    get_optional_account,
    require_permissions,
    require_roles,
    session_state_for,
)
from shared.exceptions import NotFoundError

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
roles_router = APIRouter(prefix="/api/roles", tags=["roles"])
employees_router = APIRouter(prefix="/api/employees", tags=["employees"])
access_router = APIRouter(prefix="/api/access", tags=["access"])


# Auth Endpoints
@auth_router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest):
    return await auth_service.login(payload)


@auth_router.get("/me", response_model=MeResponse)
async def me(account: Account = Depends(get_current_account)):
    return MeResponse(user=account_out(account))


@auth_router.post("/logout", response_model=LogoutResponse)
def logout():
    return auth_service.logout()


@auth_router.post("/change-password", response_model=MeResponse)
async def change_password(
    payload: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
):
    updated = await auth_service.change_password(account, payload.current_password, payload.new_password)
    return MeResponse(user=account_out(updated))


@auth_router.get("/logs", response_model=List[AuditLogOut])
async def auth_logs(
    account_id: Optional[int] = Query(default=None),
    security_events: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    account: Account = Depends(require_roles(RoleName.SUPER_ADMIN)),
):
    """Sign-in history; security_events narrows it to failed and refused sign-ins"""
    return await get_auth_logs(account_id=account_id, security_events_only=security_events, limit=limit)


# Role Endpoints
@roles_router.get("/hierarchy", response_model=RoleHierarchyResponse)
async def role_hierarchy(account: Account = Depends(get_current_account)):
    """All roles with permissions and user counts"""
    return RoleHierarchyResponse(roles=await role_service.get_role_hierarchy())


@roles_router.get("/available", response_model=List[RoleOut])
async def available_roles(account: Account = Depends(require_permissions("roles.assign"))):
    """Roles the caller may assign"""
    return await role_service.get_available_roles(account.role_name)


@roles_router.post("/assign", response_model=AssignRoleResponse)
async def assign_role(
    payload: AssignRoleRequest,
    account: Account = Depends(require_permissions("roles.assign")),
):
    updated = await role_service.assign_role(account, payload.user_id, payload.role_name)
    return AssignRoleResponse(
        success=True,
        message=f"Role set to {updated.role_name}",
        user=account_out(updated),
    )


@roles_router.get("/permissions", response_model=Dict[str, List[PermissionOut]])
async def list_permissions(account: Account = Depends(get_current_account)):
    """Permission catalog grouped by category"""
    return permission_catalog()


@roles_router.get("/my-role", response_model=MyRoleResponse)
async def my_role(account: Account = Depends(get_current_account)):
    definition = get_role_definition(account.role_name)
    if definition is None:
        return MyRoleResponse(role=account.role_name)
    return MyRoleResponse(
        role=definition.name.value,
        display_name=definition.display_name,
        level=definition.level,
        permissions=definition.permission_tokens(),
    )


# Employee Endpoints
@employees_router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee(
    payload: EmployeeCreate,
    account: Account = Depends(require_permissions("employee.create")),
):
    return await employee_service.create_employee(account, payload)


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    search: Optional[str] = Query(default=None),
    department: Optional[str] = Query(default=None),
    employment_status: Optional[EmploymentStatus] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    account: Account = Depends(require_permissions("employee.read")),
):
    items, total, limit, offset = await employee_service.list_employees(
        search=search,
        department=department,
        employment_status=employment_status,
        limit=limit,
        offset=offset,
    )
    return EmployeeListResponse(
        items=[EmployeeOut.model_validate(e) for e in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@employees_router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: int,
    account: Account = Depends(require_permissions("employee.read")),
):
    return await employee_service.get_employee(employee_id)


@employees_router.patch("/{employee_id}/employment-status", response_model=EmploymentStatusResponse)
async def update_employment_status(
    employee_id: int,
    payload: EmploymentStatusUpdate,
    account: Account = Depends(require_permissions("employee.update")),
):
    employee, action, message = await employee_service.update_employment_status(
        account, employee_id, payload.employment_status
    )
    return EmploymentStatusResponse(
        employee=EmployeeOut.model_validate(employee),
        account_action=action.value if action else None,
        message=message,
    )


@employees_router.get("/{employee_id}/audit-logs", response_model=List[AuditLogOut])
async def employee_audit_logs(
    employee_id: int,
    limit: int = Query(default=50, ge=1, le=200),
    account: Account = Depends(require_roles(RoleName.SUPER_ADMIN, RoleName.HR_ADMIN)),
):
    await employee_service.get_employee(employee_id)
    return await get_employee_audit_logs(employee_id, limit=limit)


# Account lifecycle Endpoints
@employees_router.post("/{employee_id}/invitation", response_model=InvitationResult)
async def send_invitation(
    employee_id: int,
    payload: Optional[InvitationRequest] = None,
    account: Account = Depends(require_permissions("employee.update")),
):
    """Invite the employee, or re-send the invitation while setup is pending"""
    role_name = payload.role_name if payload else None
    return await account_service.send_invitation(account, employee_id, role_name)


@employees_router.post("/{employee_id}/activation/preview", response_model=ActivationPreview)
async def preview_activation(
    employee_id: int,
    account: Account = Depends(require_permissions("accounts.manage")),
):
    """Step one of a manual activation"""
    return await account_service.preview_activation(account, employee_id)


@employees_router.post("/{employee_id}/activation", response_model=OperationResult)
async def activate_account(
    employee_id: int,
    payload: Optional[ActivationConfirm] = None,
    account: Account = Depends(require_permissions("accounts.manage")),
):
    """Step two of a manual activation, carrying the preview's confirmation token"""
    token = payload.confirmation_token if payload else None
    return await account_service.activate_account(account, employee_id, token)


@employees_router.post("/{employee_id}/suspend", response_model=OperationResult)
async def suspend_account(
    employee_id: int,
    account: Account = Depends(require_permissions("accounts.manage")),
):
    return await account_service.suspend_account(account, employee_id)


@employees_router.post("/{employee_id}/reactivate", response_model=OperationResult)
async def reactivate_account(
    employee_id: int,
    account: Account = Depends(require_permissions("accounts.manage")),
):
    return await account_service.reactivate_account(account, employee_id)


# Access Endpoints
@access_router.get("/check", response_model=AccessCheckResponse)
async def check_access(
    path: str = Query(..., min_length=1),
    account: Optional[Account] = Depends(get_optional_account),
):
    """Gate decision for a page of the portal"""
    decision = evaluate_route_access(NAVIGATION, session_state_for(account), path, settings.LOGIN_PATH)
    if decision is None:
        raise NotFoundError("Route", path)
    return AccessCheckResponse(
        path=path,
        outcome=decision.outcome,
        redirect_to=decision.redirect_to,
        required_roles=list(decision.required_roles),
        user_role=decision.user_role,
        message=decision.message,
    )


@access_router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(account: Optional[Account] = Depends(get_optional_account)):
    view = select_dashboard(account.role_name if account else None)
    return DashboardResponse(
        variant=view.variant,
        title=view.title,
        widgets=list(view.widgets),
        message=view.message,
        role=view.role,
    )
