from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from workforce_service.core.database import Base


class Permission(Base):
    """Permission model - "*" or "<resource>.<action>" """
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)  # e.g., "employee.read", "*"
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)  # Display grouping

    # Null for the wildcard
    resource = Column(String(100), nullable=True)  # e.g., "employee", "accounts"
    action = Column(String(100), nullable=True)  # e.g., "read", "manage"

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    role_permissions = relationship("RolePermission", back_populates="permission", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Permission(id={self.id}, name={self.name})>"
