"""Role to dashboard dispatch

Dispatch is an exact match over the closed role set. Unknown roles never
land on a named dashboard; they get the ``unknown_role`` view, which grants
nothing.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple
import logging

from .roles import RoleName, parse_role

logger = logging.getLogger(__name__)


class DashboardVariant(str, Enum):
    SUPER_ADMIN = "super_admin"
    HR_ADMIN = "hr_admin"
    MANAGER = "manager"
    HR_STAFF = "hr_staff"
    EMPLOYEE = "employee"
    UNKNOWN_ROLE = "unknown_role"
    AUTHENTICATION_REQUIRED = "authentication_required"


@dataclass(frozen=True)
class DashboardView:
    variant: DashboardVariant
    title: str
    widgets: Tuple[str, ...] = ()
    message: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_named_dashboard(self) -> bool:
        return self.variant in _NAMED_VARIANTS


DASHBOARDS: Dict[RoleName, DashboardView] = {
    RoleName.SUPER_ADMIN: DashboardView(
        DashboardVariant.SUPER_ADMIN,
        "System Overview",
        ("system_health", "organization_stats", "role_distribution", "security_events", "recent_activity"),
    ),
    RoleName.HR_ADMIN: DashboardView(
        DashboardVariant.HR_ADMIN,
        "HR Administration",
        ("headcount", "pending_invitations", "account_status", "recruitment_pipeline", "recent_activity"),
    ),
    RoleName.MANAGER: DashboardView(
        DashboardVariant.MANAGER,
        "Team Overview",
        ("team_members", "team_tasks", "team_attendance", "reports"),
    ),
    RoleName.HR_STAFF: DashboardView(
        DashboardVariant.HR_STAFF,
        "HR Operations",
        ("new_hires", "employee_directory", "recruitment_pipeline"),
    ),
    RoleName.EMPLOYEE: DashboardView(
        DashboardVariant.EMPLOYEE,
        "My Workspace",
        ("my_tasks", "my_profile", "my_leave"),
    ),
}

_NAMED_VARIANTS = frozenset(view.variant for view in DASHBOARDS.values())

UNKNOWN_ROLE_MESSAGE = "Your account has an unknown role. Please contact your administrator."
AUTHENTICATION_REQUIRED_MESSAGE = "Please sign in to view your dashboard."


def verify_dashboard_mapping(mapping: Dict[RoleName, DashboardView]) -> None:
    """Raise RuntimeError unless every role has exactly its own dashboard"""
    missing = [role.value for role in RoleName if role not in mapping]
    if missing:
        raise RuntimeError(f"No dashboard configured for roles: {', '.join(missing)}")
    variants = [view.variant for view in mapping.values()]
    if len(set(variants)) != len(variants):
        raise RuntimeError("Two roles share one dashboard variant")


verify_dashboard_mapping(DASHBOARDS)


def select_dashboard(role: Optional[str]) -> DashboardView:
    """Pick the dashboard for ``role``; None means no signed-in user."""
    if role is None:
        return DashboardView(
            DashboardVariant.AUTHENTICATION_REQUIRED,
            "Sign in required",
            message=AUTHENTICATION_REQUIRED_MESSAGE,
        )

    parsed = parse_role(role)
    if parsed is None:
        logger.warning(f"Configuration problem: user has unknown role {role!r}, no dashboard granted")
        return DashboardView(
            DashboardVariant.UNKNOWN_ROLE,
            "Unknown role",
            message=UNKNOWN_ROLE_MESSAGE,
            role=role,
        )

    view = DASHBOARDS[parsed]
    return DashboardView(view.variant, view.title, view.widgets, role=parsed.value)
