import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, JSON, CheckConstraint
from nikkah.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


# Only "active" has meaning here; other values come from the payment processor as-is.
SUBSCRIPTION_ACTIVE = "active"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("requests_remaining >= 0", name="ck_users_requests_remaining_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=True)
    full_name = Column(String(100), nullable=False, default="")
    role = Column(String(20), nullable=False, default=UserRole.MEMBER.value)
    gender = Column(String(10), nullable=False)
    subscription_status = Column(String(32), nullable=False, default="inactive")
    subscription_plan = Column(String(64), nullable=True)
    requests_remaining = Column(Integer, nullable=False, default=0)
    renewal_date = Column(DateTime, nullable=True)
    renewal_day = Column(Integer, nullable=True)  # day of month renewals anchor on (29-31 clamp in short months)
    has_received_initial_allocation = Column(Boolean, nullable=False, default=False)
    email_notifications = Column(Boolean, nullable=False, default=True)
    photos = Column(JSON, nullable=False, default=list)  # object storage paths
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
