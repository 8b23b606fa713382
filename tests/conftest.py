"""Shared pytest fixtures for the workforce service tests."""
import os
import tempfile

# Settings and the engine are built at import time, so point them at SQLite first
_DB_DIR = tempfile.mkdtemp(prefix="workforce-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/workforce.sqlite"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["EMAIL_DELIVERY_ENABLED"] = "false"
os.environ["BOOTSTRAP_ADMIN_EMAIL"] = ""
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = ""

from datetime import datetime, timezone
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from workforce_service.access.lifecycle import AccountStatus, ActivationMethod, EmploymentStatus
from workforce_service.access.roles import RoleName
from workforce_service.core.database import AsyncSessionLocal, Base, engine, init_db
from workforce_service.core.security import generate_jwt_token, hash_password
from workforce_service.main import app
from workforce_service.models import Account, Employee
from workforce_service.services.role_service import get_role_by_name, initialize_default_roles

PASSWORD = "Correct-Horse-42"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest_asyncio.fixture
async def db():
    """Fresh schema with the default roles seeded."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await init_db()
    await initialize_default_roles()
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def create_account(
    email: str,
    role: RoleName,
    status: AccountStatus = AccountStatus.ACTIVE,
    employee_id: Optional[int] = None,
    password_hash: Optional[str] = PASSWORD_HASH,
) -> Account:
    async with AsyncSessionLocal() as session:
        role_row = await get_role_by_name(session, role)
        account = Account(
            email=email,
            full_name=email.split("@")[0].title(),
            password_hash=password_hash,
            role_id=role_row.id,
            role=role_row,
            employee_id=employee_id,
            account_status=status,
            is_temporary_password=False,
            activated_at=datetime.now(timezone.utc) if status is AccountStatus.ACTIVE else None,
            activation_method=ActivationMethod.MANUAL if status is AccountStatus.ACTIVE else None,
        )
        session.add(account)
        await session.commit()
        return account


async def create_employee(
    code: str,
    full_name: str,
    email: str,
    department: str = "Engineering",
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE,
) -> Employee:
    async with AsyncSessionLocal() as session:
        employee = Employee(
            employee_code=code,
            full_name=full_name,
            email=email,
            department=department,
            position="Engineer",
            employment_status=employment_status,
        )
        session.add(employee)
        await session.commit()
        return employee


def auth_headers(account: Account) -> Dict[str, str]:
    token = generate_jwt_token(account.id, account.email, account.role_name)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def accounts(db) -> Dict[RoleName, Account]:
    """One active account per role."""
    return {
        role: await create_account(f"{role.value}@example.com", role)
        for role in RoleName
    }


@pytest.fixture
def headers(accounts):
    """Bearer headers keyed by role."""
    return {role: auth_headers(account) for role, account in accounts.items()}
