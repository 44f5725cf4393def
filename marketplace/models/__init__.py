# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, job, bid, notification, audit_log

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .job import Job, JobStatus
from .bid import Bid, BidStatus
from .notification import Notification, NotificationType
from .audit_log import AuditLog

__all__ = [
    "User",
    "UserRole",
    "Job",
    "JobStatus",
    "Bid",
    "BidStatus",
    "Notification",
    "NotificationType",
    "AuditLog",
]
