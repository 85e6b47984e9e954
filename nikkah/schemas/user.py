from datetime import datetime
from typing import Literal
from pydantic import BaseModel
from nikkah.models.user import UserRole


class UserBase(BaseModel):
    email: str
    full_name: str = ""
    gender: Literal["male", "female"]


class UserResponse(UserBase):
    id: str
    role: str
    subscription_status: str
    subscription_plan: str | None
    requests_remaining: int
    renewal_date: datetime | None
    email_notifications: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PublicProfile(BaseModel):
    """What another member may see in request lists and matches."""
    id: str
    full_name: str
    gender: str

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    """Admin update (all fields optional)."""
    full_name: str | None = None
    role: UserRole | None = None
    email_notifications: bool | None = None


class SubscriptionUpdate(BaseModel):
    """Fields written by the payment processor."""
    subscription_status: str
    subscription_plan: str | None = None
    renewal_date: datetime | None = None


class TokenPayload(BaseModel):
    sub: str  # user id
    email: str
    exp: int
    type: str = "access"


class RegisterRequest(BaseModel):
    email: str
    password: str
    full_name: str = ""
    gender: Literal["male", "female"]


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SetPasswordRequest(BaseModel):
    new_password: str
