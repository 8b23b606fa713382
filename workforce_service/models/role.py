from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from workforce_service.core.database import Base


class Role(Base):
    """Role model - super-admin, hr-admin, manager, hr-staff, employee"""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)  # super-admin, hr-admin, ...
    display_name = Column(String(150), nullable=False)  # Super Admin, HR Admin, ...
    description = Column(Text, nullable=True)
    level = Column(Integer, nullable=False, index=True)  # Higher is more privileged

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="role")
    role_permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Role(id={self.id}, name={self.name}, level={self.level})>"
