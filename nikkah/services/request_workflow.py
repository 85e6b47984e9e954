"""
Match / photo-reveal request workflow.
- Submit: entitlement check, then in ONE transaction consume a request credit (unless unlimited)
  and insert the pending row; any failure rolls back both. Recipient notified after commit.
- Respond: only the recipient, only if not freemium; pending -> accepted | rejected exactly once.
  Accepting a match request creates the Match row in the same transaction. Requester notified after commit.
- Inbox / outbox: read-only, joined with the other member's profile.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from nikkah.models.connection_request import (
    ConnectionRequest,
    DISPLAY_STATUS_MATCHED,
    RequestStatus,
    RequestType,
)
from nikkah.models.user import User
from nikkah.repositories import match_repository
from nikkah.repositories.request_ledger import RequestLedger
from nikkah.services.entitlement import EntitlementPolicy, get_entitlement_policy
from nikkah.services.errors import (
    AlreadyMatched,
    IncomingRequestExists,
    InsufficientRequests,
    MatchServiceError,
    NotAuthorized,
    NotFound,
    SelfRequest,
    StoreUnavailable,
    UpgradeRequired,
)
from nikkah.services.notifications import NotificationSink, get_notification_sink

logger = logging.getLogger(__name__)

_EVENT_PREFIX = {RequestType.MATCH: "match", RequestType.PHOTO_REVEAL: "photo"}


@dataclass
class RequestView:
    request: ConnectionRequest
    counterpart: User
    display_status: str


class RequestWorkflow:
    def __init__(
        self,
        policy: EntitlementPolicy | None = None,
        ledger: RequestLedger | None = None,
        sink: NotificationSink | None = None,
    ):
        self._policy = policy or get_entitlement_policy()
        self._ledger = ledger or RequestLedger()
        self._sink = sink or get_notification_sink()

    def submit_request(
        self,
        db: Session,
        requester: User,
        requested_id: str,
        request_type: RequestType,
    ) -> ConnectionRequest:
        requester_id = requester.id
        if requester_id == requested_id:
            raise SelfRequest()
        recipient = db.query(User).filter(User.id == requested_id).first()
        if not recipient:
            raise NotFound("Member not found.")
        if self._ledger.find_pending_between(db, requested_id, requester_id, request_type):
            raise IncomingRequestExists()
        if request_type == RequestType.PHOTO_REVEAL and match_repository.get_active_match_between(
            db, requester_id, requested_id
        ):
            raise AlreadyMatched()
        decision = self._policy.can_create_request(requester)
        if not decision.allowed:
            raise InsufficientRequests(decision.reason)
        unlimited = self._policy.is_unlimited(requester)
        actor_name = requester.full_name

        try:
            if not unlimited and not self._ledger.consume_request_credit(db, requester_id):
                raise InsufficientRequests()
            req = self._ledger.create(db, requester_id, requested_id, request_type)
            request_id = req.id
            db.commit()
        except MatchServiceError:
            db.rollback()
            raise
        except OperationalError as e:
            db.rollback()
            logger.exception("Store unavailable while submitting %s request", request_type.value)
            raise StoreUnavailable() from e
        except SQLAlchemyError:
            db.rollback()
            raise

        logger.info(
            "%s request %s created: %s -> %s (unlimited=%s)",
            request_type.value, request_id, requester_id, requested_id, unlimited,
        )
        self._sink.notify(
            db,
            requested_id,
            f"{_EVENT_PREFIX[request_type]}_request",
            {"actor_id": requester_id, "actor_name": actor_name, "request_id": request_id},
        )
        return self._ledger.get(db, request_id)

    def respond_to_request(
        self,
        db: Session,
        request_id: str,
        responder: User,
        decision: RequestStatus,
        request_type: RequestType | None = None,
    ) -> ConnectionRequest:
        req = self._ledger.get(db, request_id)
        if not req or (request_type is not None and req.request_type != request_type.value):
            raise NotFound("Request not found.")
        if req.requested_id != responder.id:
            raise NotAuthorized("Only the recipient can answer this request.")
        if not self._policy.can_respond_to_request(responder):
            raise UpgradeRequired()
        requester_id = req.requester_id
        request_type = RequestType(req.request_type)
        actor_name = responder.full_name

        try:
            req = self._ledger.update_status(db, request_id, decision)
            if decision == RequestStatus.ACCEPTED and request_type == RequestType.MATCH:
                if not match_repository.get_active_match_between(db, requester_id, responder.id):
                    match_repository.create_match(db, requester_id, responder.id, request_id)
            db.commit()
        except MatchServiceError:
            db.rollback()
            raise
        except OperationalError as e:
            db.rollback()
            logger.exception("Store unavailable while answering request %s", request_id)
            raise StoreUnavailable() from e
        except SQLAlchemyError:
            db.rollback()
            raise

        logger.info("%s request %s %s by %s", request_type.value, request_id, decision.value, responder.id)
        self._sink.notify(
            db,
            requester_id,
            f"{_EVENT_PREFIX[request_type]}_{decision.value}",
            {"actor_id": responder.id, "actor_name": actor_name, "request_id": request_id},
        )
        return self._ledger.get(db, request_id)

    def _display_status(self, db: Session, req: ConnectionRequest) -> str:
        if req.request_type == RequestType.PHOTO_REVEAL.value and match_repository.get_active_match_between(
            db, req.requester_id, req.requested_id
        ):
            return DISPLAY_STATUS_MATCHED
        return req.status

    def list_inbox(self, db: Session, user: User, request_type: RequestType) -> list[RequestView]:
        rows = self._ledger.inbox_with_requesters(db, user.id, request_type)
        return [RequestView(req, other, self._display_status(db, req)) for req, other in rows]

    def list_outbox(self, db: Session, user: User, request_type: RequestType) -> list[RequestView]:
        rows = self._ledger.outbox_with_recipients(db, user.id, request_type)
        return [RequestView(req, other, self._display_status(db, req)) for req, other in rows]


@lru_cache
def get_request_workflow() -> RequestWorkflow:
    return RequestWorkflow()
