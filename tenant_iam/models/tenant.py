"""
Tenant model.

Each Tenant is an isolation boundary grouping users and tenant-scoped roles.
A deactivated tenant blocks login for every user it owns.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, String

from tenant_iam.database import Base
from tenant_iam.utils.clock import utcnow


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), nullable=True)
    updated_by = Column(String(36), nullable=True)

    __table_args__ = (Index("idx_tenant_is_active", "is_active"),)

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} name={self.name!r} active={self.is_active}>"
