"""Employee records and employment status"""
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from typing import Optional, List, Tuple
from ..models import Employee, Account
from ..core.config import settings
from ..core.database import AsyncSessionLocal
from ..schemas import EmployeeCreate
from ..access.lifecycle import (
    AccountAction,
    AccountCouplingPolicy,
    AccountStatus,
    EmploymentStatus,
    plan_suspension,
)
from .account_service import ensure_can_manage
from .audit_service import record_audit
from shared.exceptions import ConflictError, NotFoundError
from shared.validators import normalize_search_term, validate_pagination
import logging

logger = logging.getLogger(__name__)


def current_coupling_policy() -> AccountCouplingPolicy:
    return AccountCouplingPolicy(suspend_on_termination=settings.SUSPEND_ACCOUNT_ON_TERMINATION)


async def create_employee(actor: Account, payload: EmployeeCreate) -> Employee:
    """Create an employee record; no account is created until an invitation is sent"""
    email = payload.email.lower().strip()
    code = payload.employee_code.strip()
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Employee).where(or_(Employee.email == email, Employee.employee_code == code))
        )
        if result.scalars().first():
            raise ConflictError("An employee with this email or employee code already exists")

        employee = Employee(
            employee_code=code,
            full_name=payload.full_name.strip(),
            email=email,
            department=payload.department,
            position=payload.position,
            hire_date=payload.hire_date,
            employment_status=payload.employment_status,
        )
        session.add(employee)
        try:
            await session.flush()
        except IntegrityError:
            await session.rollback()
            raise ConflictError("An employee with this email or employee code already exists")

        record_audit(
            session, actor.id, "employee.create", "employee", employee.id,
            new_values={"employee_code": code, "email": email},
        )
        await session.commit()
        employee_id = employee.id

    return await get_employee(employee_id)


async def get_employee(employee_id: int) -> Employee:
    async with AsyncSessionLocal() as session:
        employee = await session.get(Employee, employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee


async def list_employees(
    search: Optional[str] = None,
    department: Optional[str] = None,
    employment_status: Optional[EmploymentStatus] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> Tuple[List[Employee], int, int, int]:
    """Search employees by name, email or code; returns (items, total, limit, offset)"""
    limit, offset = validate_pagination(limit, offset)
    term = normalize_search_term(search)

    query = select(Employee)
    if term:
        pattern = f"%{term}%"
        query = query.where(
            or_(
                Employee.full_name.ilike(pattern),
                Employee.email.ilike(pattern),
                Employee.employee_code.ilike(pattern),
            )
        )
    if department:
        query = query.where(Employee.department == department)
    if employment_status:
        query = query.where(Employee.employment_status == employment_status)

    async with AsyncSessionLocal() as session:
        total_result = await session.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = total_result.scalar_one()

        result = await session.execute(
            query.order_by(Employee.full_name, Employee.id).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total, limit, offset


async def update_employment_status(
    actor: Account,
    employee_id: int,
    new_status: EmploymentStatus,
) -> Tuple[Employee, Optional[AccountAction], str]:
    """Change employment status and apply the account coupling policy"""
    policy = current_coupling_policy()
    async with AsyncSessionLocal() as session:
        employee = await session.get(Employee, employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)

        old_status = employee.employment_status
        if old_status is new_status:
            return employee, None, f"Employment status is already {new_status.value}"

        applied = policy.account_action_for(old_status, new_status, employee.account_status)
        if applied is AccountAction.SUSPEND:
            ensure_can_manage(actor, employee.account)

        employee.employment_status = new_status
        record_audit(
            session, actor.id, "employee.employment_status", "employee", employee.id,
            old_values={"employment_status": old_status.value},
            new_values={"employment_status": new_status.value},
        )

        message = f"Employment status changed to {new_status.value}"
        if applied is AccountAction.SUSPEND:
            account = employee.account
            transition = plan_suspension(account.account_status)
            account.account_status = transition.to_status
            record_audit(
                session, actor.id, "account.suspend", "account", account.id,
                old_values={"account_status": transition.from_status.value},
                new_values={"account_status": transition.to_status.value, "reason": "employment_terminated"},
            )
            message += "; account suspended"
            logger.info(f"Account {account.id} suspended after employee {employee.id} was terminated")
        elif employee.account_status is AccountStatus.SUSPENDED and old_status is EmploymentStatus.TERMINATED:
            message += "; account stays suspended until reactivated"

        await session.commit()

    return await get_employee(employee_id), applied, message
