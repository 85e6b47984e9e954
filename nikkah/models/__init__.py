from nikkah.models.user import User, UserRole, Gender
from nikkah.models.connection_request import ConnectionRequest, RequestType, RequestStatus
from nikkah.models.match import Match, MatchStatus
from nikkah.models.allocation import AllocationRecord, AllocationType
from nikkah.models.notification import Notification
from nikkah.models.profile_view import ProfileView, ProfileViewCounter

__all__ = [
    "User", "UserRole", "Gender", "ConnectionRequest", "RequestType", "RequestStatus",
    "Match", "MatchStatus", "AllocationRecord", "AllocationType", "Notification", "ProfileView",
    "ProfileViewCounter",
]
