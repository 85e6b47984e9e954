"""
Match and photo-reveal requests.
/api/requests/match/...  and  /api/requests/photo-reveal/...
Service errors (402 upgrade, 409 conflict, ...) are rendered by the handler in nikkah.main.
"""
import enum
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from nikkah.auth import get_current_user
from nikkah.database import get_db
from nikkah.models.connection_request import RequestStatus, RequestType
from nikkah.models.user import User
from nikkah.schemas.request import RequestListItem, RequestResponse, RespondBody, SubmitRequestBody
from nikkah.schemas.user import PublicProfile
from nikkah.services.request_workflow import RequestView, RequestWorkflow, get_request_workflow

router = APIRouter(prefix="/api/requests", tags=["requests"])


class RequestKind(str, enum.Enum):
    MATCH = "match"
    PHOTO_REVEAL = "photo-reveal"


_KIND_TO_TYPE = {RequestKind.MATCH: RequestType.MATCH, RequestKind.PHOTO_REVEAL: RequestType.PHOTO_REVEAL}


def _list_item(view: RequestView) -> RequestListItem:
    req = view.request
    return RequestListItem(
        id=req.id,
        request_type=req.request_type,
        requester_id=req.requester_id,
        requested_id=req.requested_id,
        status=req.status,
        created_at=req.created_at,
        responded_at=req.responded_at,
        display_status=view.display_status,
        counterpart=PublicProfile.model_validate(view.counterpart),
    )


@router.post("/{kind}", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
def submit_request(
    kind: RequestKind,
    body: SubmitRequestBody,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    workflow: RequestWorkflow = Depends(get_request_workflow),
):
    """Send a request. Uses one request credit unless the plan is unlimited."""
    req = workflow.submit_request(db, user, body.requested_id, _KIND_TO_TYPE[kind])
    return RequestResponse.model_validate(req)


@router.get("/{kind}/inbox", response_model=list[RequestListItem])
def get_inbox(
    kind: RequestKind,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    workflow: RequestWorkflow = Depends(get_request_workflow),
):
    """Pending requests sent to me, newest first. Freemium members can see these too."""
    return [_list_item(v) for v in workflow.list_inbox(db, user, _KIND_TO_TYPE[kind])]


@router.get("/{kind}/outbox", response_model=list[RequestListItem])
def get_outbox(
    kind: RequestKind,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    workflow: RequestWorkflow = Depends(get_request_workflow),
):
    return [_list_item(v) for v in workflow.list_outbox(db, user, _KIND_TO_TYPE[kind])]


@router.post("/{kind}/{request_id}/respond", response_model=RequestResponse)
def respond_to_request(
    kind: RequestKind,
    request_id: str,
    body: RespondBody,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    workflow: RequestWorkflow = Depends(get_request_workflow),
):
    """Accept or reject a request addressed to me."""
    req = workflow.respond_to_request(db, request_id, user, RequestStatus(body.decision), _KIND_TO_TYPE[kind])
    return RequestResponse.model_validate(req)
