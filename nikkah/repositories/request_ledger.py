"""
Request ledger: storage of match / photo-reveal requests. No business policy.
Functions never commit; the caller owns the transaction.
Status changes and quota consumption are single conditional UPDATEs (compare-and-swap),
so two concurrent calls cannot both succeed.
"""
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nikkah.models.connection_request import ConnectionRequest, RequestStatus, RequestType
from nikkah.models.user import User
from nikkah.services.errors import DuplicateActiveRequest, InvalidTransition, SelfRequest

TERMINAL_STATUSES = (RequestStatus.ACCEPTED, RequestStatus.REJECTED)
PENDING_INDEX = "ix_connection_requests_one_pending"
_SQLITE_PENDING_COLUMNS = "connection_requests.requester_id, connection_requests.requested_id"


def _is_pending_duplicate(e: IntegrityError) -> bool:
    """True when e is the one-pending-per-pair index firing, not some other constraint."""
    message = str(e.orig)
    # PostgreSQL names the index; SQLite lists the indexed columns
    return PENDING_INDEX in message or _SQLITE_PENDING_COLUMNS in message


def get_request(db: Session, request_id: str) -> ConnectionRequest | None:
    return db.query(ConnectionRequest).filter(ConnectionRequest.id == request_id).first()


def find_pending_between(
    db: Session,
    requester_id: str,
    requested_id: str,
    request_type: RequestType,
) -> ConnectionRequest | None:
    return (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.requester_id == requester_id,
            ConnectionRequest.requested_id == requested_id,
            ConnectionRequest.request_type == request_type.value,
            ConnectionRequest.status == RequestStatus.PENDING.value,
        )
        .first()
    )


def create_request(
    db: Session,
    requester_id: str,
    requested_id: str,
    request_type: RequestType,
) -> ConnectionRequest:
    """
    Insert a pending request. Raises SelfRequest or DuplicateActiveRequest.
    The partial unique index catches a concurrent duplicate the pre-check missed;
    the session must then be rolled back by the caller.
    """
    if requester_id == requested_id:
        raise SelfRequest()
    if find_pending_between(db, requester_id, requested_id, request_type):
        raise DuplicateActiveRequest()
    req = ConnectionRequest(
        request_type=request_type.value,
        requester_id=requester_id,
        requested_id=requested_id,
        status=RequestStatus.PENDING.value,
    )
    db.add(req)
    try:
        db.flush()
    except IntegrityError as e:
        if _is_pending_duplicate(e):
            raise DuplicateActiveRequest() from e
        raise
    return req


def get_pending_for_recipient(db: Session, user_id: str, request_type: RequestType) -> list[ConnectionRequest]:
    """Pending requests addressed to user_id, newest first."""
    return (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.requested_id == user_id,
            ConnectionRequest.request_type == request_type.value,
            ConnectionRequest.status == RequestStatus.PENDING.value,
        )
        .order_by(ConnectionRequest.created_at.desc(), ConnectionRequest.id.desc())
        .all()
    )


def get_outgoing_for_requester(db: Session, user_id: str, request_type: RequestType) -> list[ConnectionRequest]:
    """All requests sent by user_id (any status), newest first."""
    return (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.requester_id == user_id,
            ConnectionRequest.request_type == request_type.value,
        )
        .order_by(ConnectionRequest.created_at.desc(), ConnectionRequest.id.desc())
        .all()
    )


def inbox_with_requesters(db: Session, user_id: str, request_type: RequestType) -> list[tuple[ConnectionRequest, User]]:
    return (
        db.query(ConnectionRequest, User)
        .join(User, ConnectionRequest.requester_id == User.id)
        .filter(
            ConnectionRequest.requested_id == user_id,
            ConnectionRequest.request_type == request_type.value,
            ConnectionRequest.status == RequestStatus.PENDING.value,
        )
        .order_by(ConnectionRequest.created_at.desc(), ConnectionRequest.id.desc())
        .all()
    )


def outbox_with_recipients(db: Session, user_id: str, request_type: RequestType) -> list[tuple[ConnectionRequest, User]]:
    return (
        db.query(ConnectionRequest, User)
        .join(User, ConnectionRequest.requested_id == User.id)
        .filter(
            ConnectionRequest.requester_id == user_id,
            ConnectionRequest.request_type == request_type.value,
        )
        .order_by(ConnectionRequest.created_at.desc(), ConnectionRequest.id.desc())
        .all()
    )


def update_status(db: Session, request_id: str, new_status: RequestStatus) -> ConnectionRequest:
    """pending -> accepted | rejected, exactly once. Anything else raises InvalidTransition."""
    if new_status not in TERMINAL_STATUSES:
        raise InvalidTransition(f"Cannot move a request to '{new_status.value}'.")
    now = datetime.utcnow()
    updated = (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.id == request_id,
            ConnectionRequest.status == RequestStatus.PENDING.value,
        )
        .update(
            {
                ConnectionRequest.status: new_status.value,
                ConnectionRequest.responded_at: now,
                ConnectionRequest.updated_at: now,
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        raise InvalidTransition()
    req = get_request(db, request_id)
    db.refresh(req)
    return req


def consume_request_credit(db: Session, user_id: str) -> bool:
    """Decrement requests_remaining only if positive. False when the balance is already 0."""
    updated = (
        db.query(User)
        .filter(User.id == user_id, User.requests_remaining > 0)
        .update(
            {User.requests_remaining: User.requests_remaining - 1},
            synchronize_session=False,
        )
    )
    return updated == 1


class RequestLedger:
    """Thin wrapper for dependency injection; delegates to module functions."""

    @staticmethod
    def get(db: Session, request_id: str) -> ConnectionRequest | None:
        return get_request(db, request_id)

    @staticmethod
    def find_pending_between(
        db: Session, requester_id: str, requested_id: str, request_type: RequestType
    ) -> ConnectionRequest | None:
        return find_pending_between(db, requester_id, requested_id, request_type)

    @staticmethod
    def create(db: Session, requester_id: str, requested_id: str, request_type: RequestType) -> ConnectionRequest:
        return create_request(db, requester_id, requested_id, request_type)

    @staticmethod
    def get_pending_for_recipient(db: Session, user_id: str, request_type: RequestType) -> list[ConnectionRequest]:
        return get_pending_for_recipient(db, user_id, request_type)

    @staticmethod
    def get_outgoing_for_requester(db: Session, user_id: str, request_type: RequestType) -> list[ConnectionRequest]:
        return get_outgoing_for_requester(db, user_id, request_type)

    @staticmethod
    def inbox_with_requesters(db: Session, user_id: str, request_type: RequestType) -> list[tuple[ConnectionRequest, User]]:
        return inbox_with_requesters(db, user_id, request_type)

    @staticmethod
    def outbox_with_recipients(db: Session, user_id: str, request_type: RequestType) -> list[tuple[ConnectionRequest, User]]:
        return outbox_with_recipients(db, user_id, request_type)

    @staticmethod
    def update_status(db: Session, request_id: str, new_status: RequestStatus) -> ConnectionRequest:
        return update_status(db, request_id, new_status)

    @staticmethod
    def consume_request_credit(db: Session, user_id: str) -> bool:
        return consume_request_credit(db, user_id)
