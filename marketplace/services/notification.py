from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.core.exceptions import NotFoundError
from marketplace.models.notification import Notification, NotificationType


class NotificationService:
    @staticmethod
    def build(
        user_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.MESSAGE,
        related_id: Optional[int] = None,
        on_model: Optional[str] = None,
        link: Optional[str] = None,
    ) -> Notification:
        return Notification(
            user_id=user_id,
            type=NotificationType(type).value,
            title=title,
            message=message,
            related_id=related_id,
            on_model=on_model,
            link=link,
        )

    @staticmethod
    def notify_user(db: Session, user_id: int, title: str, message: str, **kwargs) -> Notification:
        """
        Stage a notification in the caller's transaction.
        The caller commits it together with the change that triggered it.
        """
        notification = NotificationService.build(user_id, title, message, **kwargs)
        db.add(notification)
        return notification

    @staticmethod
    def notify_many(db: Session, user_ids: Iterable[int], title: str, message: str, **kwargs) -> List[Notification]:
        notifications = [NotificationService.build(uid, title, message, **kwargs) for uid in user_ids]
        db.add_all(notifications)
        return notifications

    @staticmethod
    def list_for_user(db: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(settings.notification_list_limit)
            .all()
        )

    @staticmethod
    def unread_count(db: Session, user_id: int) -> int:
        return db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read == False  # noqa: E712
        ).count()

    @staticmethod
    def _get_owned(db: Session, notification_id: int, user_id: int) -> Notification:
        notification = db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).first()
        if not notification:
            raise NotFoundError("Notification", notification_id)
        return notification

    @staticmethod
    def mark_as_read(db: Session, notification_id: int, user_id: int) -> Notification:
        notification = NotificationService._get_owned(db, notification_id, user_id)
        notification.is_read = True
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        updated = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read == False  # noqa: E712
        ).update({Notification.is_read: True}, synchronize_session=False)
        db.commit()
        return updated

    @staticmethod
    def delete(db: Session, notification_id: int, user_id: int) -> None:
        notification = NotificationService._get_owned(db, notification_id, user_id)
        db.delete(notification)
        db.commit()
