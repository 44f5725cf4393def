from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from marketplace.database import Base
from marketplace.models.base import utcnow
import enum

class JobStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CLOSED = "closed"

class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    budget_min = Column(Float, nullable=False)
    budget_max = Column(Float, nullable=False)
    categories = Column(JSON, default=list, nullable=False)
    skills_required = Column(JSON, default=list, nullable=False)

    # Stored as the enum value so guarded UPDATEs can compare plain strings
    status = Column(String(20), default=JobStatus.OPEN.value, nullable=False, index=True)
    employer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    bid_accepted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    employer = relationship("User", foreign_keys=[employer_id], back_populates="jobs")
    freelancer = relationship("User", foreign_keys=[freelancer_id])
    bids = relationship("Bid", back_populates="job", cascade="all, delete-orphan")

    @property
    def budget(self) -> dict:
        return {"min": self.budget_min, "max": self.budget_max}

    def snapshot(self) -> dict:
        """State captured for audit before/after records."""
        return {
            "status": self.status,
            "bid_accepted": self.bid_accepted,
            "freelancer_id": self.freelancer_id,
        }
