"""
Daily profile view limit for freemium members (distinct profiles per UTC calendar day).
Re-opening a profile already viewed today is free. Non-freemium members are unlimited.
The per-day counter row is bumped with a conditional UPDATE (view_count < limit), so concurrent
views cannot push a member past the limit.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nikkah.config import get_settings
from nikkah.models.profile_view import ProfileView, ProfileViewCounter
from nikkah.models.user import User
from nikkah.services.entitlement import EntitlementPolicy, get_entitlement_policy
from nikkah.services.errors import ViewLimitReached


@dataclass
class ViewAllowance:
    can_view: bool
    views_remaining: int | None  # None = unlimited


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


def count_views_today(db: Session, viewer_id: str, today: date) -> int:
    used = (
        db.query(ProfileViewCounter.view_count)
        .filter(ProfileViewCounter.viewer_id == viewer_id, ProfileViewCounter.view_date == today)
        .scalar()
    )
    return used or 0


def _ensure_counter(db: Session, viewer_id: str, today: date) -> None:
    exists = (
        db.query(ProfileViewCounter.id)
        .filter(ProfileViewCounter.viewer_id == viewer_id, ProfileViewCounter.view_date == today)
        .first()
    )
    if exists:
        return
    db.add(ProfileViewCounter(viewer_id=viewer_id, view_date=today, view_count=0))
    try:
        db.commit()
    except IntegrityError:
        # Created concurrently
        db.rollback()


def _already_viewed(db: Session, viewer_id: str, profile_id: str, today: date) -> bool:
    return (
        db.query(ProfileView)
        .filter(
            ProfileView.viewer_id == viewer_id,
            ProfileView.profile_id == profile_id,
            ProfileView.view_date == today,
        )
        .first()
        is not None
    )


def check_view_allowance(
    db: Session,
    viewer: User,
    today: date | None = None,
    policy: EntitlementPolicy | None = None,
) -> ViewAllowance:
    policy = policy or get_entitlement_policy()
    if not policy.is_freemium(viewer):
        return ViewAllowance(can_view=True, views_remaining=None)
    limit = get_settings().freemium_daily_profile_views
    used = count_views_today(db, viewer.id, today or _today_utc())
    remaining = max(0, limit - used)
    return ViewAllowance(can_view=remaining > 0, views_remaining=remaining)


def record_profile_view(
    db: Session,
    viewer: User,
    profile_id: str,
    today: date | None = None,
    policy: EntitlementPolicy | None = None,
) -> ViewAllowance:
    """Count a view of profile_id. Raises ViewLimitReached when a freemium member is out of views."""
    policy = policy or get_entitlement_policy()
    today = today or _today_utc()
    if not policy.is_freemium(viewer) or viewer.id == profile_id:
        return check_view_allowance(db, viewer, today, policy)
    if _already_viewed(db, viewer.id, profile_id, today):
        return check_view_allowance(db, viewer, today, policy)
    limit = get_settings().freemium_daily_profile_views
    _ensure_counter(db, viewer.id, today)
    db.add(ProfileView(viewer_id=viewer.id, profile_id=profile_id, view_date=today))
    try:
        db.flush()
    except IntegrityError:
        # Same profile recorded concurrently; counts once.
        db.rollback()
        return check_view_allowance(db, viewer, today, policy)
    claimed = (
        db.query(ProfileViewCounter)
        .filter(
            ProfileViewCounter.viewer_id == viewer.id,
            ProfileViewCounter.view_date == today,
            ProfileViewCounter.view_count < limit,
        )
        .update({ProfileViewCounter.view_count: ProfileViewCounter.view_count + 1}, synchronize_session=False)
    )
    if claimed != 1:
        db.rollback()
        raise ViewLimitReached()
    db.commit()
    return check_view_allowance(db, viewer, today, policy)
