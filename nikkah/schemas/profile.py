from pydantic import BaseModel


class EntitlementResponse(BaseModel):
    is_freemium: bool
    unlimited: bool
    can_respond: bool
    can_create: bool
    requests_remaining: int
    reason: str = ""
    views_remaining_today: int | None  # None = unlimited


class ViewResponse(BaseModel):
    can_view: bool
    views_remaining: int | None


class PhotosResponse(BaseModel):
    visible: bool
    status: str  # visible | requested | revealed | matched | none
    match_id: str | None = None
    photos: list[str]


class UploadPhotoResponse(BaseModel):
    path: str
    url: str
