"""
Profile photo storage (local folder) and time-limited signed URLs.
The signed URL carries a JWT (type "photo") naming the stored path; it expires after
photo_url_expire_minutes so links shared outside the app stop working.
"""
import shutil
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlencode

from jose import JWTError, jwt

from nikkah.config import get_settings

ALLOWED_CONTENT_TYPES = {"image/jpeg": ".jpg", "image/jpg": ".jpg", "image/png": ".png", "image/webp": ".webp"}


def photo_upload_dir() -> Path:
    settings = get_settings()
    if settings.photo_upload_dir:
        return Path(settings.photo_upload_dir)
    return Path(__file__).resolve().parent.parent.parent / "uploads" / "photos"


def store_photo(fileobj: BinaryIO, owner_id: str, content_type: str) -> str:
    """Write the blob and return its storage path (relative to the upload dir)."""
    ext = ALLOWED_CONTENT_TYPES[content_type]
    folder = photo_upload_dir() / owner_id
    folder.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}{ext}"
    with (folder / name).open("wb") as f:
        shutil.copyfileobj(fileobj, f)
    return f"{owner_id}/{name}"


def resolve_photo_file(path: str) -> Path | None:
    """Resolve a storage path under the upload dir. None if invalid (path traversal) or missing."""
    base = photo_upload_dir().resolve()
    try:
        full = (base / path).resolve()
        full.relative_to(base)
    except (ValueError, OSError):
        return None
    if not full.is_file():
        return None
    return full


def create_photo_token(path: str, now: datetime | None = None) -> str:
    settings = get_settings()
    expire = (now or datetime.utcnow()) + timedelta(minutes=settings.photo_url_expire_minutes)
    payload = {"path": path, "exp": expire, "type": "photo"}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def verify_photo_token(token: str) -> str | None:
    """Return the signed path, or None if the token is invalid or expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") != "photo":
        return None
    return payload.get("path")


def signed_photo_url(path: str) -> str:
    """Public URLs (https://...) are returned as-is; stored paths get a signed link."""
    if path.startswith("https://"):
        return path
    settings = get_settings()
    query = urlencode({"path": path, "token": create_photo_token(path)})
    return f"{settings.app_base_url.rstrip('/')}/api/photos?{query}"
