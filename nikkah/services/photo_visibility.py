"""
Photo visibility, derived at read time (nothing stored besides request/match rows):
- Viewing your own profile, or any non-female profile: visible.
- Female profile viewed by a male member: visible if she has a pending match request to him,
  if the viewer's photo-reveal request to her was accepted, or if they have an active match
  (unless she hid photos for that match).
"""
from dataclasses import dataclass

from sqlalchemy.orm import Session

from nikkah.models.connection_request import ConnectionRequest, RequestStatus, RequestType
from nikkah.models.user import Gender, User
from nikkah.repositories import match_repository
from nikkah.repositories.request_ledger import find_pending_between
from nikkah.services.photo_storage import signed_photo_url

STATUS_VISIBLE = "visible"
STATUS_REQUESTED = "requested"
STATUS_REVEALED = "revealed"
STATUS_MATCHED = "matched"
STATUS_NONE = "none"


@dataclass
class PhotoVisibility:
    visible: bool
    status: str
    match_id: str | None = None


def photo_visibility(db: Session, viewer: User, profile: User) -> PhotoVisibility:
    if viewer.id == profile.id or profile.gender != Gender.FEMALE.value:
        return PhotoVisibility(visible=True, status=STATUS_VISIBLE)

    if viewer.gender == Gender.MALE.value and find_pending_between(db, profile.id, viewer.id, RequestType.MATCH):
        return PhotoVisibility(visible=True, status=STATUS_REQUESTED)

    match = match_repository.get_active_match_between(db, viewer.id, profile.id)
    if match:
        return PhotoVisibility(visible=not match.photos_hidden, status=STATUS_MATCHED, match_id=match.id)

    revealed = (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.requester_id == viewer.id,
            ConnectionRequest.requested_id == profile.id,
            ConnectionRequest.request_type == RequestType.PHOTO_REVEAL.value,
            ConnectionRequest.status == RequestStatus.ACCEPTED.value,
        )
        .first()
    )
    if revealed:
        return PhotoVisibility(visible=True, status=STATUS_REVEALED)
    return PhotoVisibility(visible=False, status=STATUS_NONE)


def visible_photo_urls(db: Session, viewer: User, profile: User) -> tuple[PhotoVisibility, list[str]]:
    """Visibility plus signed URLs; URLs are empty when photos are hidden from this viewer."""
    visibility = photo_visibility(db, viewer, profile)
    if not visibility.visible:
        return visibility, []
    return visibility, [signed_photo_url(p) for p in (profile.photos or [])]
