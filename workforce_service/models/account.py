from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from workforce_service.core.database import Base
from workforce_service.access.lifecycle import AccountStatus, ActivationMethod


class Account(Base):
    """Login account - one role, optionally linked to an employee record"""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=True)

    # Exactly one role
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)

    # Null for accounts without an employee record (bootstrap admin)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True, unique=True, index=True)

    # Lifecycle
    account_status = Column(
        SQLEnum(AccountStatus), default=AccountStatus.PENDING_SETUP, nullable=False, index=True
    )
    is_temporary_password = Column(Boolean, default=False, nullable=False)  # Must change on next login
    invitation_sent_at = Column(DateTime(timezone=True), nullable=True)
    activated_at = Column(DateTime(timezone=True), nullable=True)
    activated_by_account_id = Column(Integer, nullable=True)  # Null when activated by first login
    activation_method = Column(SQLEnum(ActivationMethod), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    role = relationship("Role", back_populates="accounts", lazy="selectin")
    employee = relationship("Employee", back_populates="account")

    @property
    def role_name(self):
        return self.role.name if self.role else None

    def __repr__(self):
        return f"<Account(id={self.id}, email={self.email}, status={self.account_status})>"
