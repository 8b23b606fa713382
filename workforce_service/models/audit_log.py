from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from workforce_service.core.database import Base


class AuditLog(Base):
    """Who changed what, with before/after values"""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_account_id = Column(Integer, nullable=True, index=True)  # Null for system actions
    action = Column(String(100), nullable=False, index=True)  # e.g. account.activate
    entity_type = Column(String(50), nullable=False, index=True)  # employee, account
    entity_id = Column(Integer, nullable=True, index=True)  # Null for failed logins on unknown emails
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action={self.action}, entity={self.entity_type}:{self.entity_id})>"
