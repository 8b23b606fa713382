"""Role hierarchy and permission model

Roles form a closed set. Permissions are either the wildcard (every
permission) or a ``<resource>.<action>`` pair; the two cases are distinct
types so callers never special-case a ``"*"`` string.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Union


class RoleName(str, Enum):
    """The five system roles"""
    SUPER_ADMIN = "super-admin"
    HR_ADMIN = "hr-admin"
    MANAGER = "manager"
    HR_STAFF = "hr-staff"
    EMPLOYEE = "employee"


def parse_role(value: Optional[str]) -> Optional[RoleName]:
    """Exact-match a raw role string; anything unrecognized is None."""
    if value is None:
        return None
    try:
        return RoleName(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class AllPermissions:
    """Wildcard grant covering every permission"""

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True, order=True)
class NamedPermission:
    resource: str
    action: str

    def __str__(self) -> str:
        return f"{self.resource}.{self.action}"


Permission = Union[AllPermissions, NamedPermission]

ALL_PERMISSIONS = AllPermissions()


def parse_permission(token: str) -> Permission:
    """Parse ``*`` or ``resource.action``; raise ValueError for anything else."""
    token = token.strip()
    if token == "*":
        return ALL_PERMISSIONS
    resource, sep, action = token.partition(".")
    if not sep or not resource or not action or "." in action:
        raise ValueError(f"Invalid permission token: {token!r}")
    return NamedPermission(resource, action)


def _perms(*tokens: str) -> FrozenSet[Permission]:
    return frozenset(parse_permission(t) for t in tokens)


# Display grouping, keyed by resource
PERMISSION_CATEGORIES: Dict[str, str] = {
    "dashboard": "Dashboard",
    "employee": "Employee Management",
    "accounts": "Account Management",
    "roles": "Roles & Permissions",
    "payroll": "Payroll",
    "recruitment": "Recruitment",
    "reports": "Reports",
    "tasks": "Tasks",
    "profile": "Self Service",
}

PERMISSION_DESCRIPTIONS: Dict[str, str] = {
    "employee.create": "Create employee records",
    "employee.read": "View employee records",
    "employee.update": "Edit employee records and send invitations",
    "employee.delete": "Delete employee records",
    "accounts.manage": "Activate, suspend and reactivate accounts",
    "roles.manage": "Manage role configuration",
    "roles.assign": "Assign roles to users",
    "reports.generate": "Generate reports",
    "payroll.manage": "Manage payroll",
    "recruitment.manage": "Manage recruitment",
    "tasks.create": "Create tasks",
    "tasks.read": "View tasks",
    "tasks.update": "Update tasks",
    "tasks.delete": "Delete tasks",
    "tasks.assign": "Assign tasks",
    "profile.update": "Update own profile",
}


@dataclass(frozen=True)
class RoleDefinition:
    name: RoleName
    level: int
    display_name: str
    description: str
    permissions: FrozenSet[Permission] = field(default_factory=frozenset)

    @property
    def is_all_access(self) -> bool:
        return ALL_PERMISSIONS in self.permissions

    def grants(self, permission: Permission) -> bool:
        if self.is_all_access:
            return True
        if isinstance(permission, AllPermissions):
            # Only a wildcard role holds the wildcard itself
            return False
        return permission in self.permissions

    def permission_tokens(self) -> List[str]:
        return sorted(str(p) for p in self.permissions)


ROLE_DEFINITIONS: Dict[RoleName, RoleDefinition] = {
    RoleName.SUPER_ADMIN: RoleDefinition(
        name=RoleName.SUPER_ADMIN,
        level=5,
        display_name="Super Admin",
        description="Full system access with all administrative privileges",
        permissions=_perms("*"),
    ),
    RoleName.HR_ADMIN: RoleDefinition(
        name=RoleName.HR_ADMIN,
        level=4,
        display_name="HR Admin",
        description="HR administrative access with employee and recruitment management",
        permissions=_perms(
            "employee.create", "employee.read", "employee.update", "employee.delete",
            "accounts.manage",
            "roles.manage", "roles.assign",
            "reports.generate", "payroll.manage", "recruitment.manage",
            "tasks.create", "tasks.read", "tasks.update", "tasks.delete", "tasks.assign",
        ),
    ),
    RoleName.MANAGER: RoleDefinition(
        name=RoleName.MANAGER,
        level=3,
        display_name="Manager",
        description="Team management and oversight responsibilities",
        permissions=_perms(
            "employee.read", "employee.update",
            "tasks.create", "tasks.read", "tasks.update", "tasks.assign",
            "reports.generate",
        ),
    ),
    RoleName.HR_STAFF: RoleDefinition(
        name=RoleName.HR_STAFF,
        level=2,
        display_name="HR Staff",
        description="HR support staff with limited administrative access",
        permissions=_perms(
            "employee.create", "employee.read", "employee.update",
            "recruitment.manage",
            "tasks.read", "tasks.update",
        ),
    ),
    RoleName.EMPLOYEE: RoleDefinition(
        name=RoleName.EMPLOYEE,
        level=1,
        display_name="Employee",
        description="Basic employee access for personal information and requests",
        permissions=_perms("tasks.read", "tasks.update", "profile.update"),
    ),
}

DEFAULT_ROLE = RoleName.EMPLOYEE


def get_role_definition(role: Union[RoleName, str, None]) -> Optional[RoleDefinition]:
    if not isinstance(role, RoleName):
        role = parse_role(role)
    if role is None:
        return None
    return ROLE_DEFINITIONS[role]


def has_permissions(
    role: Union[RoleName, str, None],
    required: Iterable[Union[Permission, str]],
    require_any: bool = False,
) -> bool:
    """Check a role against required permissions (all-of, or any-of when asked).

    Unknown roles hold no permissions. An empty requirement is satisfied.
    """
    definition = get_role_definition(role)
    wanted = [parse_permission(p) if isinstance(p, str) else p for p in required]
    if not wanted:
        return True
    if definition is None:
        return False
    if require_any:
        return any(definition.grants(p) for p in wanted)
    return all(definition.grants(p) for p in wanted)


def can_grant_role(assigner: Union[RoleName, str, None], target: Union[RoleName, str]) -> bool:
    """An assigner may hand out roles up to their own level, never above it."""
    assigner_def = get_role_definition(assigner)
    target_def = get_role_definition(target)
    if assigner_def is None or target_def is None:
        return False
    return target_def.level <= assigner_def.level


def permission_catalog() -> Dict[str, List[Dict[str, str]]]:
    """Known permissions grouped by display category"""
    catalog: Dict[str, List[Dict[str, str]]] = {}
    for token in sorted(PERMISSION_DESCRIPTIONS):
        resource = token.split(".", 1)[0]
        category = PERMISSION_CATEGORIES.get(resource, "Other")
        catalog.setdefault(category, []).append(
            {"permission": token, "description": PERMISSION_DESCRIPTIONS[token]}
        )
    return catalog
