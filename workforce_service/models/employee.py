from sqlalchemy import Column, Integer, String, Date, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from workforce_service.core.database import Base
from workforce_service.access.lifecycle import AccountStatus, EmploymentStatus


class Employee(Base):
    """Employee record - exists independently of any login account"""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_code = Column(String(50), unique=True, nullable=False, index=True)  # e.g. EMP-0001
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    department = Column(String(150), nullable=True, index=True)
    position = Column(String(150), nullable=True)

    employment_status = Column(
        SQLEnum(EmploymentStatus), default=EmploymentStatus.ACTIVE, nullable=False, index=True
    )
    hire_date = Column(Date, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Zero or one account
    account = relationship("Account", back_populates="employee", uselist=False, lazy="selectin")

    @property
    def account_status(self) -> AccountStatus:
        """no_account until an invitation creates the account"""
        if self.account is None:
            return AccountStatus.NO_ACCOUNT
        return self.account.account_status

    @property
    def account_role(self):
        if self.account is None or self.account.role is None:
            return None
        return self.account.role.name

    def __repr__(self):
        return f"<Employee(id={self.id}, code={self.employee_code}, status={self.employment_status})>"
