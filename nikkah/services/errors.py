"""
Typed failures of the request workflow. Routers do not catch these; the handler
registered in nikkah.main renders them as JSON with a stable `code`.
Entitlement failures set upgrade_required so the client shows an upgrade prompt.
"""
from fastapi import status


class MatchServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"
    default_detail = "Something went wrong. Please try again."
    upgrade_required = False
    retryable = False

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class SelfRequest(MatchServiceError):
    code = "self_request"
    default_detail = "You cannot send a request to yourself."


class DuplicateActiveRequest(MatchServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_active_request"
    default_detail = "A request to this member is already pending."


class IncomingRequestExists(MatchServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "incoming_request_exists"
    default_detail = "This member has already sent you a request. Please check your incoming requests."


class AlreadyMatched(MatchServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_matched"
    default_detail = "You are already matched with this member and can view their photos."


class InvalidTransition(MatchServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"
    default_detail = "This request has already been answered."


class NotAuthorized(MatchServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "not_authorized"
    default_detail = "You are not allowed to perform this action."


class NotFound(MatchServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found."


class UpgradeRequired(MatchServiceError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "upgrade_required"
    default_detail = "Upgrade your plan to accept or decline requests."
    upgrade_required = True


class InsufficientRequests(MatchServiceError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "insufficient_requests"
    default_detail = "You have no requests remaining. Please upgrade or wait for renewal."
    upgrade_required = True


class ViewLimitReached(MatchServiceError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "view_limit_reached"
    default_detail = "Daily profile view limit reached. Upgrade to view more profiles."
    upgrade_required = True


class StoreUnavailable(MatchServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "store_unavailable"
    default_detail = "Service temporarily unavailable. Please try again."
    retryable = True
