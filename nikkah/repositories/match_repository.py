"""Match rows: one per accepted match request. Functions never commit."""
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from nikkah.models.match import Match, MatchStatus


def _between(user_a_id: str, user_b_id: str):
    return or_(
        and_(Match.user_one_id == user_a_id, Match.user_two_id == user_b_id),
        and_(Match.user_one_id == user_b_id, Match.user_two_id == user_a_id),
    )


def get_active_match_between(db: Session, user_a_id: str, user_b_id: str) -> Match | None:
    return (
        db.query(Match)
        .filter(_between(user_a_id, user_b_id), Match.status == MatchStatus.ACTIVE.value)
        .first()
    )


def create_match(db: Session, user_one_id: str, user_two_id: str, request_id: str | None = None) -> Match:
    match = Match(
        user_one_id=user_one_id,
        user_two_id=user_two_id,
        request_id=request_id,
        status=MatchStatus.ACTIVE.value,
    )
    db.add(match)
    db.flush()
    return match


def get_match_for_member(db: Session, match_id: str, user_id: str) -> Match | None:
    """Match by id, only if user_id is one of its two members."""
    return (
        db.query(Match)
        .filter(
            Match.id == match_id,
            or_(Match.user_one_id == user_id, Match.user_two_id == user_id),
        )
        .first()
    )


def list_active_matches(db: Session, user_id: str) -> list[Match]:
    return (
        db.query(Match)
        .filter(
            or_(Match.user_one_id == user_id, Match.user_two_id == user_id),
            Match.status == MatchStatus.ACTIVE.value,
        )
        .order_by(Match.created_at.desc())
        .all()
    )


def deactivate_match(db: Session, match_id: str, unmatched_by: str) -> bool:
    """active -> inactive; False if the match was already inactive."""
    updated = (
        db.query(Match)
        .filter(Match.id == match_id, Match.status == MatchStatus.ACTIVE.value)
        .update(
            {Match.status: MatchStatus.INACTIVE.value, Match.unmatched_by: unmatched_by},
            synchronize_session=False,
        )
    )
    return updated == 1


def other_member_id(match: Match, user_id: str) -> str:
    return match.user_two_id if match.user_one_id == user_id else match.user_one_id
