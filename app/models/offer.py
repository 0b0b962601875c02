"""Offer (job posting) model."""

import enum
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.helpers import utcnow


class OfferStatus(str, enum.Enum):
    """Lifecycle status of an offer."""

    DRAFT = "draft"
    PENDING_VALIDATION = "pending_validation"
    VALIDATED = "validated"
    REJECTED = "rejected"
    PUBLISHED = "published"
    CLOSED = "closed"
    EXPIRED = "expired"


class OfferKind(str, enum.Enum):
    """Kind of position offered."""

    JOB = "job"
    INTERNSHIP = "internship"


class Offer(Base):
    """Job or internship posting."""

    __tablename__ = "offers"
    __table_args__ = (
        Index("ix_offers_status_publication_date", "status", "publication_date"),
        Index("ix_offers_recruiter_status", "recruiter_id", "status"),
        Index("ix_offers_expiration_status", "expiration_date", "status"),
        Index("ix_offers_category_status", "category_id", "status"),
        Index("ix_offers_kind_location", "offer_kind", "location"),
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    experience = Column(String(255), nullable=False)  # "1-3 years", "Junior", ...
    location = Column(String(255), nullable=False)
    offer_kind = Column(
        Enum(OfferKind, name="offer_kind", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    contract_type = Column(String(255), nullable=False)  # "permanent", "fixed-term", "freelance", ...
    salary = Column(Numeric(10, 2), nullable=True)

    # Lifecycle
    status = Column(
        Enum(OfferStatus, name="offer_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=OfferStatus.DRAFT,
        nullable=False,
    )
    publication_date = Column(Date, nullable=True)
    expiration_date = Column(Date, nullable=False)

    # Admin validation
    rejection_reason = Column(Text, nullable=True)
    validated_at = Column(DateTime, nullable=True)
    validated_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Sponsorship (0 = not featured)
    sponsored_level = Column(Integer, default=0, nullable=False, index=True)
    featured_until = Column(DateTime, nullable=True, index=True)

    # Ownership: the company is resolved through the owning user unless company_id is set
    recruiter_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    recruiter = relationship("User", foreign_keys=[recruiter_id])
    validator = relationship("User", foreign_keys=[validated_by_id])
    created_by = relationship("User", foreign_keys=[created_by_id])
    company = relationship("Company")
    category = relationship("Category")
    applications = relationship(
        "Application",
        back_populates="offer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def is_featured_at(self, now: datetime) -> bool:
        if (self.sponsored_level or 0) <= 0:
            return False
        if self.featured_until is None:
            return True
        return self.featured_until >= now

    @property
    def is_featured(self) -> bool:
        return self.is_featured_at(utcnow())

    def __repr__(self):
        return f"<Offer {self.title} [{self.status.value if self.status else None}]>"
