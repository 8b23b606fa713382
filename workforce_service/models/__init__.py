from workforce_service.models.role import Role
from workforce_service.models.permission import Permission
from workforce_service.models.role_permission import RolePermission
from workforce_service.models.employee import Employee
from workforce_service.models.account import Account
from workforce_service.models.audit_log import AuditLog

__all__ = [
    "Role",
    "Permission",
    "RolePermission",
    "Employee",
    "Account",
    "AuditLog",
]
