from datetime import datetime
from pydantic import BaseModel
from nikkah.schemas.user import PublicProfile


class MatchResponse(BaseModel):
    id: str
    user_one_id: str
    user_two_id: str
    status: str
    photos_hidden: bool
    unmatched_by: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class MatchListItem(MatchResponse):
    member: PublicProfile
