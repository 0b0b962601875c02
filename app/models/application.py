"""Application model."""

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class Application(Base):
    """Candidate application to an offer."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("candidate_id", "offer_id", name="unique_candidate_offer_application"),
    )

    candidate_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    offer_id = Column(Uuid(as_uuid=True), ForeignKey("offers.id", ondelete="CASCADE"), nullable=False, index=True)

    # Status tracking
    status = Column(String(20), default="submitted")  # submitted, viewed, shortlisted, rejected, accepted

    cover_letter = Column(String(2000))

    # Relationships
    candidate = relationship("User")
    offer = relationship("Offer", back_populates="applications")

    def __repr__(self):
        return f"<Application {self.candidate_id} -> {self.offer_id}>"
