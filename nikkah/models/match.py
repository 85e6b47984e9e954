import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from nikkah.database import Base


class MatchStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Match(Base):
    """Created when a match request is accepted. user_one = requester, user_two = recipient."""
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_one_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    user_two_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    request_id = Column(String(36), ForeignKey("connection_requests.id"), nullable=True)
    status = Column(String(20), nullable=False, default=MatchStatus.ACTIVE.value)
    photos_hidden = Column(Boolean, nullable=False, default=False)
    unmatched_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
