import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from tenant_iam.database import Base
from tenant_iam.utils.clock import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Profile
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    # Login state
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    login_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime(timezone=True), nullable=True)
    password_changed_at = Column(DateTime(timezone=True), nullable=True, default=utcnow)

    # Audit
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), nullable=True)
    updated_by = Column(String(36), nullable=True)

    tenant = relationship("Tenant", lazy="joined")
    user_roles = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def active_roles(self) -> list:
        """Assigned roles, excluding soft-deleted role definitions."""
        return [ur.role for ur in self.user_roles if ur.role is not None and ur.role.deleted_at is None]

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.active_roles]

    @property
    def permission_keys(self) -> list[str]:
        """Union of permission keys over all assigned roles, first occurrence order."""
        keys: dict[str, None] = {}
        for role in self.active_roles:
            for key in role.permission_keys:
                keys.setdefault(key, None)
        return list(keys)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} tenant={self.tenant_id}>"


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="user_roles")
    role = relationship("Role", lazy="selectin")

    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_role"),)
