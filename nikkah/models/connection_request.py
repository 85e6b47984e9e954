"""Directional request between two members: match request or photo-reveal request."""
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, CheckConstraint, Index, text
from nikkah.database import Base


class RequestType(str, enum.Enum):
    MATCH = "match"
    PHOTO_REVEAL = "photo_reveal"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Display-only state for photo-reveal rows once the two members are matched.
DISPLAY_STATUS_MATCHED = "matched"


class ConnectionRequest(Base):
    __tablename__ = "connection_requests"
    __table_args__ = (
        CheckConstraint("requester_id <> requested_id", name="ck_connection_requests_not_self"),
        # One pending row per (requester, requested, type)
        Index(
            "ix_connection_requests_one_pending",
            "requester_id",
            "requested_id",
            "request_type",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    request_type = Column(String(20), nullable=False, index=True)
    requester_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    requested_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    responded_at = Column(DateTime, nullable=True)
    reminder_first_sent = Column(Boolean, nullable=False, default=False)
    reminder_second_sent = Column(Boolean, nullable=False, default=False)
    reminder_final_sent = Column(Boolean, nullable=False, default=False)
