from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from nikkah.auth import get_current_user
from nikkah.database import get_db
from nikkah.models.user import User
from nikkah.schemas.notification import NotificationResponse, UnreadCountResponse
from nikkah.services import notifications as notification_service
from nikkah.services.errors import NotFound

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    limit: int = 50,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    limit = max(1, min(limit, 100))
    return [
        NotificationResponse.model_validate(n)
        for n in notification_service.list_notifications(db, user.id, limit=limit)
    ]


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return UnreadCountResponse(unread=notification_service.unread_count(db, user.id))


@router.post("/read-all")
def read_all(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = notification_service.mark_all_read(db, user.id)
    return {"message": "All notifications marked as read", "updated": updated}


@router.post("/{notification_id}/read")
def read_one(
    notification_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not notification_service.mark_read(db, user.id, notification_id):
        raise NotFound("Notification not found.")
    return {"message": "Notification marked as read"}
