"""Distinct profile views per day, used for the freemium daily view limit."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Integer, UniqueConstraint
from nikkah.database import Base


class ProfileView(Base):
    __tablename__ = "profile_views"
    __table_args__ = (
        UniqueConstraint("viewer_id", "profile_id", "view_date", name="uq_profile_views_viewer_profile_day"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    viewer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    profile_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    view_date = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class ProfileViewCounter(Base):
    """Views used per viewer per day; incremented with a conditional UPDATE against the limit."""
    __tablename__ = "profile_view_counters"
    __table_args__ = (
        UniqueConstraint("viewer_id", "view_date", name="uq_profile_view_counters_viewer_day"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    viewer_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    view_date = Column(Date, nullable=False)
    view_count = Column(Integer, nullable=False, default=0)
