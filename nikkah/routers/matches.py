from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from nikkah.auth import get_current_user
from nikkah.database import get_db
from nikkah.models.user import User
from nikkah.schemas.match import MatchListItem, MatchResponse
from nikkah.schemas.user import PublicProfile
from nikkah.services import matches as match_service
from nikkah.services.notifications import NotificationSink, get_notification_sink

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.get("", response_model=list[MatchListItem])
def list_matches(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active matches, newest first, with the other member's profile."""
    return [
        MatchListItem(
            id=m.id,
            user_one_id=m.user_one_id,
            user_two_id=m.user_two_id,
            status=m.status,
            photos_hidden=m.photos_hidden,
            unmatched_by=m.unmatched_by,
            created_at=m.created_at,
            member=PublicProfile.model_validate(other),
        )
        for m, other in match_service.list_matches_with_members(db, user)
    ]


@router.post("/{match_id}/unmatch", response_model=MatchResponse)
def unmatch(
    match_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return MatchResponse.model_validate(match_service.unmatch(db, match_id, user, sink))


@router.post("/{match_id}/hide-photos", response_model=MatchResponse)
def hide_photos(
    match_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Female members only: hide photos from this match."""
    return MatchResponse.model_validate(match_service.set_photos_hidden(db, match_id, user, True))


@router.post("/{match_id}/unhide-photos", response_model=MatchResponse)
def unhide_photos(
    match_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return MatchResponse.model_validate(match_service.set_photos_hidden(db, match_id, user, False))
