"""Audit trail for account and employee changes"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_
from typing import Optional, Dict, Any, List
from ..models import AuditLog, Account
from ..core.database import AsyncSessionLocal
import logging

logger = logging.getLogger(__name__)


def record_audit(
    session: AsyncSession,
    actor_account_id: Optional[int],
    action: str,
    entity_type: str,
    entity_id: Optional[int],
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Add an audit entry to the caller's transaction; it commits with the change it describes"""
    entry = AuditLog(
        actor_account_id=actor_account_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
    )
    session.add(entry)
    logger.info(f"Audit: {action} on {entity_type}:{entity_id} by {actor_account_id or 'system'}")
    return entry


async def get_employee_audit_logs(employee_id: int, limit: int = 50) -> List[AuditLog]:
    """Entries about the employee record and about its account, newest first"""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Account.id).where(Account.employee_id == employee_id)
        )
        account_id = result.scalar_one_or_none()

        conditions = [and_(AuditLog.entity_type == "employee", AuditLog.entity_id == employee_id)]
        if account_id is not None:
            conditions.append(and_(AuditLog.entity_type == "account", AuditLog.entity_id == account_id))

        result = await session.execute(
            select(AuditLog)
            .where(or_(*conditions))
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


AUTH_LOGIN = "auth.login"
AUTH_LOGIN_FAILED = "auth.login_failed"
AUTH_LOGIN_REFUSED = "auth.login_refused"
SECURITY_EVENTS = (AUTH_LOGIN_FAILED, AUTH_LOGIN_REFUSED)


async def get_auth_logs(
    account_id: Optional[int] = None,
    security_events_only: bool = False,
    limit: int = 50,
) -> List[AuditLog]:
    """
    Sign-in history, newest first

    Args:
        account_id: Only events about this account
        security_events_only: Only failed and refused sign-ins
        limit: Maximum number of entries
    """
    query = select(AuditLog).where(AuditLog.action.like("auth.%"))
    if security_events_only:
        query = query.where(AuditLog.action.in_(SECURITY_EVENTS))
    if account_id is not None:
        query = query.where(AuditLog.entity_type == "account", AuditLog.entity_id == account_id)

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
        )
        return list(result.scalars().all())
