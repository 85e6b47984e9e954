from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse
from nikkah.services.photo_storage import resolve_photo_file, verify_photo_token

router = APIRouter(prefix="/api/photos", tags=["photos"])


@router.get("")
def get_photo(path: str, token: str):
    """Serve a stored photo from a signed link. No login needed; the token expires."""
    signed_path = verify_photo_token(token)
    if not signed_path or signed_path != path:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired photo link")
    full = resolve_photo_file(path)
    if not full:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo not found")
    return FileResponse(full)
