"""User model."""

from sqlalchemy import Boolean, Column, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan", lazy="selectin")
    owned_company = relationship("Company", back_populates="owner", uselist=False)

    @property
    def role_names(self) -> frozenset:
        return frozenset(role.name for role in self.roles)

    def __repr__(self):
        return f"<User {self.email} ({', '.join(sorted(self.role_names))})>"


class UserRole(Base):
    """Role held by a user (admin, recruiter, community_manager, candidate)."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="unique_user_role"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)

    user = relationship("User", back_populates="roles")

    def __repr__(self):
        return f"<UserRole {self.user_id} {self.name}>"
