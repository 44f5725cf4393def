"""
User Model.
A single account type whose role decides which side of the marketplace it acts on.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, JSON
from sqlalchemy.orm import relationship
import enum
from marketplace.database import Base
from marketplace.models.base import utcnow


class UserRole(str, enum.Enum):
    """
    Marketplace roles.

    - FREELANCER: bids on open jobs
    - EMPLOYER: posts jobs and accepts/rejects bids
    - HYBRID: both of the above
    """
    FREELANCER = "freelancer"
    EMPLOYER = "employer"
    HYBRID = "hybrid"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    role = Column(Enum(UserRole), default=UserRole.FREELANCER, nullable=False, index=True)
    skills = Column(JSON, default=list, nullable=False)
    bio = Column(String(500), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    jobs = relationship("Job", foreign_keys="[Job.employer_id]", back_populates="employer")
    bids = relationship("Bid", back_populates="freelancer", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.username} ({self.role.value})>"

    @property
    def is_employer(self) -> bool:
        """Check if user can post jobs and decide on bids."""
        return self.role in (UserRole.EMPLOYER, UserRole.HYBRID)

    @property
    def is_freelancer(self) -> bool:
        """Check if user can bid on jobs."""
        return self.role in (UserRole.FREELANCER, UserRole.HYBRID)
