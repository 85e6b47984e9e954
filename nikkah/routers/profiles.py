"""
Profile-facing endpoints: my entitlements, counting a profile view (freemium daily limit),
visibility-gated photo links, and uploading my own photos.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session
from nikkah.auth import get_current_user
from nikkah.database import get_db
from nikkah.models.user import User
from nikkah.schemas.profile import EntitlementResponse, PhotosResponse, UploadPhotoResponse, ViewResponse
from nikkah.services.entitlement import EntitlementPolicy, get_entitlement_policy
from nikkah.services.errors import NotFound
from nikkah.services.photo_storage import ALLOWED_CONTENT_TYPES, signed_photo_url, store_photo
from nikkah.services.photo_visibility import visible_photo_urls
from nikkah.services.view_limits import check_view_allowance, record_profile_view

router = APIRouter(prefix="/api/profiles", tags=["profiles"])
logger = logging.getLogger(__name__)

MAX_PHOTOS = 6


def _get_member(db: Session, user_id: str) -> User:
    member = db.query(User).filter(User.id == user_id).first()
    if not member:
        raise NotFound("Member not found.")
    return member


@router.get("/me/entitlement", response_model=EntitlementResponse)
def my_entitlement(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: EntitlementPolicy = Depends(get_entitlement_policy),
):
    state = policy.snapshot(user)
    allowance = check_view_allowance(db, user, policy=policy)
    return EntitlementResponse(
        is_freemium=state.is_freemium,
        unlimited=state.unlimited,
        can_respond=state.can_respond,
        can_create=state.can_create,
        requests_remaining=state.requests_remaining,
        reason=state.reason,
        views_remaining_today=allowance.views_remaining,
    )


@router.post("/me/photos", response_model=UploadPhotoResponse, status_code=status.HTTP_201_CREATED)
def upload_photo(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be a JPEG, PNG or WebP image.")
    photos = list(user.photos or [])
    if len(photos) >= MAX_PHOTOS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"You can upload at most {MAX_PHOTOS} photos.")
    path = store_photo(file.file, user.id, file.content_type)
    photos.append(path)
    user.photos = photos
    db.commit()
    logger.info("User %s uploaded photo %s", user.id, path)
    return UploadPhotoResponse(path=path, url=signed_photo_url(path))


@router.post("/{profile_id}/view", response_model=ViewResponse)
def view_profile(
    profile_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: EntitlementPolicy = Depends(get_entitlement_policy),
):
    """Count a profile view. Freemium members get 402 once today's distinct profiles are used up."""
    _get_member(db, profile_id)
    allowance = record_profile_view(db, user, profile_id, policy=policy)
    return ViewResponse(can_view=allowance.can_view, views_remaining=allowance.views_remaining)


@router.get("/{profile_id}/photos", response_model=PhotosResponse)
def get_profile_photos(
    profile_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = _get_member(db, profile_id)
    visibility, urls = visible_photo_urls(db, user, profile)
    return PhotosResponse(
        visible=visibility.visible,
        status=visibility.status,
        match_id=visibility.match_id,
        photos=urls,
    )
