"""Matches: list, unmatch, and photo hiding (female members only)."""
import logging

from sqlalchemy.orm import Session

from nikkah.models.match import Match
from nikkah.models.user import Gender, User
from nikkah.repositories import match_repository
from nikkah.services.errors import InvalidTransition, NotAuthorized, NotFound
from nikkah.services.notifications import NotificationSink, get_notification_sink

logger = logging.getLogger(__name__)


def list_matches_with_members(db: Session, user: User) -> list[tuple[Match, User]]:
    matches = match_repository.list_active_matches(db, user.id)
    out = []
    for match in matches:
        other = db.query(User).filter(User.id == match_repository.other_member_id(match, user.id)).first()
        if other:
            out.append((match, other))
    return out


def unmatch(db: Session, match_id: str, user: User, sink: NotificationSink | None = None) -> Match:
    match = match_repository.get_match_for_member(db, match_id, user.id)
    if not match:
        raise NotFound("Match not found.")
    other_id = match_repository.other_member_id(match, user.id)
    if not match_repository.deactivate_match(db, match_id, user.id):
        db.rollback()
        raise InvalidTransition("This match has already been removed.")
    db.commit()
    logger.info("Match %s removed by %s", match_id, user.id)
    (sink or get_notification_sink()).notify(
        db, other_id, "match_removed", {"actor_id": user.id, "actor_name": user.full_name}
    )
    db.refresh(match)
    return match


def set_photos_hidden(db: Session, match_id: str, user: User, hidden: bool) -> Match:
    if user.gender != Gender.FEMALE.value:
        raise NotAuthorized("Only female members can hide or show photos.")
    match = match_repository.get_match_for_member(db, match_id, user.id)
    if not match:
        raise NotFound("Match not found.")
    match.photos_hidden = hidden
    db.commit()
    db.refresh(match)
    return match
