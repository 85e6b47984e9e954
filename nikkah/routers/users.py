from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from nikkah.database import get_db
from nikkah.models.user import User
from nikkah.auth import get_current_user_admin
from nikkah.schemas.user import UserResponse, UserUpdate, SubscriptionUpdate
from nikkah.services.allocation import apply_subscription_change

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=list[UserResponse])
def get_all_users(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    """List all users (admin only)."""
    users = db.query(User).order_by(User.created_at.desc()).all()
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    return UserResponse.model_validate(_get_user_or_404(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: UserUpdate,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    """Update profile fields (admin only). Quotas are only changed by allocation."""
    user = _get_user_or_404(db, user_id)
    if body.full_name is not None:
        user.full_name = body.full_name
    if body.role is not None:
        user.role = body.role.value
    if body.email_notifications is not None:
        user.email_notifications = body.email_notifications
    db.commit()
    db.refresh(user)
    return UserResponse.model_validate(user)


@router.put("/{user_id}/subscription", response_model=UserResponse)
def update_subscription(
    user_id: str,
    body: SubscriptionUpdate,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    """
    Write the payment processor's result for a member.
    The first activation grants the plan's initial requests.
    """
    user = _get_user_or_404(db, user_id)
    user = apply_subscription_change(
        db,
        user,
        body.subscription_status,
        body.subscription_plan,
        renewal_date=body.renewal_date,
    )
    return UserResponse.model_validate(user)
