"""Company model."""

import enum

from sqlalchemy import Column, Enum, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class CompanyStatus(str, enum.Enum):
    """Company validation status."""

    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"


class Company(Base):
    """Recruiting organization."""

    __tablename__ = "companies"

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    website = Column(String(500))

    # Validation workflow
    status = Column(
        Enum(CompanyStatus, name="company_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=CompanyStatus.PENDING,
        nullable=False,
        index=True,
    )
    rejection_reason = Column(Text, nullable=True)

    # Primary recruiter; offers are linked to this user, not to the company row
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), unique=True, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="owned_company")
    assignments = relationship("CompanyAssignment", back_populates="company", cascade="all, delete-orphan")

    @property
    def is_validated(self) -> bool:
        return self.status == CompanyStatus.VALIDATED

    def __repr__(self):
        return f"<Company {self.name} ({self.status.value if self.status else None})>"


class CompanyAssignment(Base):
    """Community-manager delegation over a company."""

    __tablename__ = "company_assignments"
    __table_args__ = (
        UniqueConstraint("company_id", "user_id", name="unique_company_manager"),
    )

    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    company = relationship("Company", back_populates="assignments")
    user = relationship("User")

    def __repr__(self):
        return f"<CompanyAssignment {self.user_id} -> {self.company_id}>"
