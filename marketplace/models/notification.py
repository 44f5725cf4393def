from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from marketplace.database import Base
from marketplace.models.base import utcnow
import enum

class NotificationType(str, enum.Enum):
    BID = "bid"
    JOB = "job"
    JOB_AWARD = "job_award"
    REVIEW = "review"
    TRANSACTION = "transaction"
    MESSAGE = "message"

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False, default=NotificationType.MESSAGE.value)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_id = Column(Integer, nullable=True)
    on_model = Column(String(50), nullable=True)  # Job, Bid, Review, Transaction
    link = Column(String(255), nullable=True)  # Optional link to navigate to
    is_read = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    # Relationships
    user = relationship("User", back_populates="notifications")
