"""Request quota allocations. One row per (user, billing period, type); the insert guards against double allocation."""
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from nikkah.database import Base


class AllocationType(str, enum.Enum):
    INITIAL = "initial"
    MONTHLY = "monthly"


class AllocationRecord(Base):
    __tablename__ = "allocation_history"
    __table_args__ = (
        UniqueConstraint("user_id", "billing_period", "allocation_type", name="uq_allocation_user_period_type"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    billing_period = Column(String(7), nullable=False)  # "YYYY-MM"
    allocation_type = Column(String(16), nullable=False)
    amount = Column(Integer, nullable=False)
    previous_amount = Column(Integer, nullable=False)
    new_amount = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
