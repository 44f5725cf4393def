from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.models.user import User
from marketplace.routers.auth_deps import get_current_user
from marketplace.schemas.notification import NotificationResponse, UnreadCount
from marketplace.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("/", response_model=List[NotificationResponse])
def get_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return NotificationService.list_for_user(db, current_user.id, unread_only=unread_only)

@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "count": NotificationService.unread_count(db, current_user.id)}

@router.patch("/mark-all-read")
def mark_all_notifications_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = NotificationService.mark_all_as_read(db, current_user.id)
    return {"success": True, "message": "All notifications marked as read", "updated": updated}

@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return NotificationService.mark_as_read(db, notification_id, current_user.id)

@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    NotificationService.delete(db, notification_id, current_user.id)
    return {"success": True, "message": "Notification deleted"}
