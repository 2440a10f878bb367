from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.models.user import User, UserRole
from app.schemas.notification import NotificationResponse, NotificationListResponse
from app.services.appointment_service import AppointmentService
from app.services.notification_service import NotificationService
from app.utils.auth import get_current_user, require_roles
from app.utils.response import APIResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("", response_model=NotificationListResponse)
def get_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the caller's notifications, newest first"""
    return NotificationService.get_user_notifications(db, current_user.id, page, limit, unread_only)

@router.get("/unread-count")
def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"unread_count": NotificationService.get_unread_count(db, current_user.id)}

@router.patch("/read-all")
def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    updated = NotificationService.mark_all_as_read(db, current_user.id)
    return APIResponse.success(
        message=f"Marked {updated} notifications as read",
        data={"updated": updated}
    )

@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService.mark_as_read(db, notification_id, current_user.id)

@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService.delete_notification(db, notification_id, current_user.id)

@router.post("/reminders")
def send_reminders(
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Send reminders for appointments starting within the reminder window"""
    sent = NotificationService.send_due_reminders(db)
    return APIResponse.success(message=f"Sent {sent} reminders", data={"sent": sent})

@router.post("/missed")
def process_missed_appointments(
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Mark past scheduled appointments as no-show and notify their patients"""
    missed = AppointmentService.mark_missed_appointments(db)
    return APIResponse.success(message=f"Marked {missed} appointments as no-show", data={"missed": missed})
