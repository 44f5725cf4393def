import logging
from typing import Optional

from sqlalchemy.orm import Session

from marketplace.models.user import User


class BaseService:
    """
    Common plumbing for services: the request's DB session, the acting user
    (if any) and a module-scoped logger.
    """

    def __init__(self, db: Session, actor: Optional[User] = None):
        self.db = db
        self.actor = actor
        self._logger = logging.getLogger(self.__class__.__module__)

    @property
    def actor_id(self) -> Optional[int]:
        return self.actor.id if self.actor is not None else None

    @property
    def actor_role(self) -> Optional[str]:
        if self.actor is None:
            return None
        return self.actor.role.value if hasattr(self.actor.role, "value") else self.actor.role

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)

    def commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
