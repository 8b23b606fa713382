from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from .access.lifecycle import AccountStatus, EmploymentStatus, ActivationMethod
from .access.gate import AccessOutcome
from .access.dashboards import DashboardVariant


# Auth Schemas
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AccountOut(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    account_status: AccountStatus
    is_temporary_password: bool
    employee_id: Optional[int] = None
    activated_at: Optional[datetime] = None
    activation_method: Optional[ActivationMethod] = None


class AuthResponse(BaseModel):
    user: AccountOut
    token: str
    must_change_password: bool = False
    activated: bool = False  # True when this login completed account setup


class MeResponse(BaseModel):
    user: AccountOut


class LogoutResponse(BaseModel):
    success: bool
    message: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)


# Role Schemas
class RoleOut(BaseModel):
    name: str
    display_name: str
    description: Optional[str] = None
    level: int
    permissions: List[str]
    user_count: int = 0


class RoleHierarchyResponse(BaseModel):
    roles: List[RoleOut]


class AssignRoleRequest(BaseModel):
    user_id: int
    role_name: str


class AssignRoleResponse(BaseModel):
    success: bool
    message: str
    user: AccountOut


class MyRoleResponse(BaseModel):
    role: Optional[str] = None
    display_name: Optional[str] = None
    level: Optional[int] = None
    permissions: List[str] = []


class PermissionOut(BaseModel):
    permission: str
    description: str


# Employee Schemas
class EmployeeCreate(BaseModel):
    employee_code: str = Field(min_length=1, max_length=50)
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    department: Optional[str] = None
    position: Optional[str] = None
    hire_date: Optional[date] = None
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE


class EmployeeOut(BaseModel):
    id: int
    employee_code: str
    full_name: str
    email: str
    department: Optional[str] = None
    position: Optional[str] = None
    employment_status: EmploymentStatus
    hire_date: Optional[date] = None
    account_status: AccountStatus
    account_role: Optional[str] = None

    class Config:
        from_attributes = True


class EmployeeListResponse(BaseModel):
    items: List[EmployeeOut]
    total: int
    limit: int
    offset: int


class EmploymentStatusUpdate(BaseModel):
    employment_status: EmploymentStatus


class EmploymentStatusResponse(BaseModel):
    employee: EmployeeOut
    account_action: Optional[str] = None  # Set when the change also moved the account
    message: str


# Account lifecycle Schemas
class InvitationRequest(BaseModel):
    role_name: Optional[str] = None  # Defaults to employee for new accounts


class OperationResult(BaseModel):
    success: bool
    message: str
    account_status: AccountStatus
    changed: bool


class InvitationResult(OperationResult):
    email_sent: bool
    # Only returned when the mail was not delivered, so an admin can hand it over
    temporary_password: Optional[str] = None


class ActivationPreview(BaseModel):
    employee_id: int
    account_status: AccountStatus
    consequences: List[str]
    confirmation_token: Optional[str] = None  # None when there is nothing to confirm
    expires_at: Optional[datetime] = None


class ActivationConfirm(BaseModel):
    confirmation_token: Optional[str] = None


class AuditLogOut(BaseModel):
    id: int
    actor_account_id: Optional[int] = None
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Access Schemas
class AccessCheckResponse(BaseModel):
    path: str
    outcome: AccessOutcome
    redirect_to: Optional[str] = None
    required_roles: List[str] = []
    user_role: Optional[str] = None
    message: Optional[str] = None


class DashboardResponse(BaseModel):
    variant: DashboardVariant
    title: str
    widgets: List[str] = []
    message: Optional[str] = None
    role: Optional[str] = None
