from marketplace.services.base import BaseService
from marketplace.models.audit_log import AuditLog
from typing import Optional

class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        details: Optional[dict] = None,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ) -> Optional[AuditLog]:
        """
        Create an audit log entry for the acting user.
        Strictly append-only. The entry joins the caller's transaction and is
        committed together with the change it describes.
        """
        try:
            def sanitize(obj):
                if hasattr(obj, "model_dump"):
                    return obj.model_dump(mode="json")
                if isinstance(obj, dict):
                    return {k: sanitize(v) for k, v in obj.items()}
                if isinstance(obj, list):
                    return [sanitize(i) for i in obj]
                return obj

            db_log = AuditLog(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=self.actor_id,
                user_role=self.actor_role,
                details=sanitize(details or {}),
                before_state=sanitize(before_state),
                after_state=sanitize(after_state)
            )
            self.db.add(db_log)
            self.db.flush()
            return db_log
        except Exception as e:
            # An audit failure must not block the marketplace action itself
            self._logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None
