from .roles import (
    RoleName,
    Permission,
    AllPermissions,
    NamedPermission,
    ALL_PERMISSIONS,
    ROLE_DEFINITIONS,
    parse_role,
    parse_permission,
    has_permissions,
)
from .gate import (
    SessionState,
    CurrentUser,
    AccessOutcome,
    AccessDecision,
    evaluate_access,
    evaluate_route_access,
)
from .dashboards import DashboardVariant, DashboardView, select_dashboard
from .lifecycle import AccountStatus, EmploymentStatus, ActivationMethod, AccountCouplingPolicy

__all__ = [
    "RoleName",
    "Permission",
    "AllPermissions",
    "NamedPermission",
    "ALL_PERMISSIONS",
    "ROLE_DEFINITIONS",
    "parse_role",
    "parse_permission",
    "has_permissions",
    "SessionState",
    "CurrentUser",
    "AccessOutcome",
    "AccessDecision",
    "evaluate_access",
    "evaluate_route_access",
    "DashboardVariant",
    "DashboardView",
    "select_dashboard",
    "AccountStatus",
    "EmploymentStatus",
    "ActivationMethod",
    "AccountCouplingPolicy",
]
