from datetime import datetime
from typing import Literal
from pydantic import BaseModel
from nikkah.schemas.user import PublicProfile


class SubmitRequestBody(BaseModel):
    requested_id: str


class RespondBody(BaseModel):
    decision: Literal["accepted", "rejected"]


class RequestResponse(BaseModel):
    id: str
    request_type: str
    requester_id: str
    requested_id: str
    status: str
    created_at: datetime
    responded_at: datetime | None

    class Config:
        from_attributes = True


class RequestListItem(RequestResponse):
    """Inbox / outbox row. display_status is 'matched' for photo-reveal rows of matched members."""
    display_status: str
    counterpart: PublicProfile
