"""Role service - default roles, hierarchy and role assignment"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from typing import Dict, List, Optional
from ..models import Role, Permission, RolePermission, Account
from ..core.database import AsyncSessionLocal
from ..access.roles import (
    ROLE_DEFINITIONS,
    PERMISSION_CATEGORIES,
    PERMISSION_DESCRIPTIONS,
    NamedPermission,
    RoleName,
    can_grant_role,
    get_role_definition,
    parse_permission,
    parse_role,
)
from .audit_service import record_audit
from shared.exceptions import AuthorizationError, NotFoundError, ValidationError
import logging

logger = logging.getLogger(__name__)


def _known_permission_tokens() -> List[str]:
    tokens = set(PERMISSION_DESCRIPTIONS)
    for definition in ROLE_DEFINITIONS.values():
        tokens.update(definition.permission_tokens())
    return sorted(tokens)


async def initialize_default_roles():
    """Seed the five system roles and their permissions; existing rows are brought in line"""
    async with AsyncSessionLocal() as session:
        permissions: Dict[str, Permission] = {}
        for token in _known_permission_tokens():
            result = await session.execute(select(Permission).where(Permission.name == token))
            permission = result.scalar_one_or_none()
            if not permission:
                parsed = parse_permission(token)
                is_named = isinstance(parsed, NamedPermission)
                permission = Permission(
                    name=token,
                    description=PERMISSION_DESCRIPTIONS.get(token, "All permissions" if token == "*" else None),
                    category=PERMISSION_CATEGORIES.get(parsed.resource) if is_named else None,
                    resource=parsed.resource if is_named else None,
                    action=parsed.action if is_named else None,
                )
                session.add(permission)
            permissions[token] = permission
        await session.flush()

        for definition in ROLE_DEFINITIONS.values():
            result = await session.execute(
                select(Role)
                .options(selectinload(Role.role_permissions).selectinload(RolePermission.permission))
                .where(Role.name == definition.name.value)
            )
            role = result.scalar_one_or_none()
            if not role:
                role = Role(name=definition.name.value, role_permissions=[])
                session.add(role)
            role.display_name = definition.display_name
            role.description = definition.description
            role.level = definition.level

            wanted = set(definition.permission_tokens())
            current = {rp.permission.name: rp for rp in role.role_permissions}
            for token, link in current.items():
                if token not in wanted:
                    role.role_permissions.remove(link)
            for token in wanted - set(current):
                role.role_permissions.append(RolePermission(permission=permissions[token]))

        await session.commit()
        logger.debug("Default roles ensured")


async def get_role_by_name(session: AsyncSession, role_name: RoleName) -> Role:
    result = await session.execute(select(Role).where(Role.name == role_name.value))
    role = result.scalar_one_or_none()
    if not role:
        # Roles are seeded at startup; a missing row is a deployment problem
        raise NotFoundError("Role", role_name.value)
    return role


async def get_role_hierarchy() -> List[dict]:
    """All roles, most privileged first, with their permissions and how many accounts hold them"""
    async with AsyncSessionLocal() as session:
        counts_result = await session.execute(
            select(Account.role_id, func.count(Account.id)).group_by(Account.role_id)
        )
        counts = {role_id: count for role_id, count in counts_result.all()}

        result = await session.execute(
            select(Role)
            .options(selectinload(Role.role_permissions).selectinload(RolePermission.permission))
            .order_by(Role.level.desc())
        )
        roles = result.scalars().all()

        return [
            {
                "name": role.name,
                "display_name": role.display_name,
                "description": role.description,
                "level": role.level,
                "permissions": sorted(rp.permission.name for rp in role.role_permissions),
                "user_count": counts.get(role.id, 0),
            }
            for role in roles
        ]


async def get_available_roles(assigner_role: Optional[str]) -> List[dict]:
    """Roles the assigner may hand out: their own level and below"""
    hierarchy = await get_role_hierarchy()
    return [role for role in hierarchy if can_grant_role(assigner_role, role["name"])]


async def assign_role(actor: Account, user_id: int, role_name: str) -> Account:
    """Give ``user_id`` exactly one new role"""
    target_role = parse_role(role_name)
    if target_role is None:
        raise ValidationError(f"Unknown role: {role_name}")

    if not can_grant_role(actor.role_name, target_role):
        raise AuthorizationError(
            f"You cannot assign the role {target_role.value}",
            actual_role=actor.role_name,
        )

    async with AsyncSessionLocal() as session:
        account = await session.get(Account, user_id)
        if not account:
            raise NotFoundError("User", user_id)

        current = get_role_definition(account.role_name)
        actor_definition = get_role_definition(actor.role_name)
        if current is not None and actor_definition is not None and current.level > actor_definition.level:
            raise AuthorizationError(
                "You cannot change the role of a user above your own level",
                actual_role=actor.role_name,
            )

        old_role = account.role_name
        if old_role == target_role.value:
            return account

        role = await get_role_by_name(session, target_role)
        account.role_id = role.id
        account.role = role
        record_audit(
            session,
            actor.id,
            "account.role_assign",
            "account",
            account.id,
            old_values={"role": old_role},
            new_values={"role": target_role.value},
        )
        await session.commit()

        logger.info(f"Role of account {account.id} changed from {old_role} to {target_role.value} by {actor.id}")
        return account
