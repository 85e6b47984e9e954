"""
Freemium / subscription entitlements. Pure functions of user attributes, no I/O.
- Freemium: male member without an active subscription. May view requests, may not answer them.
- Creating a request needs requests_remaining > 0 or an unlimited plan.
- Monthly allocation: female members reset to a fixed quota; male subscribers roll over (quota added on top).
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from nikkah.config import Settings, get_settings
from nikkah.models.user import Gender, SUBSCRIPTION_ACTIVE

MONTHLY_PLAN = "Monthly Plan"
ANNUAL_PLAN = "Annual Plan"
UNLIMITED_PLANS = frozenset({"Unlimited Plan", "Limited Offer - Unlimited Plan"})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


@dataclass(frozen=True)
class Quota:
    amount: int
    rollover: bool


@dataclass(frozen=True)
class EntitlementState:
    is_freemium: bool
    unlimited: bool
    can_respond: bool
    can_create: bool
    requests_remaining: int
    reason: str = ""


class EntitlementPolicy:
    """Single place for the plan/gender rules so they can change without touching the workflow."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()

    def is_freemium(self, user: Any) -> bool:
        return user.gender == Gender.MALE.value and user.subscription_status != SUBSCRIPTION_ACTIVE

    def can_respond_to_request(self, user: Any) -> bool:
        return not self.is_freemium(user)

    def is_unlimited(self, user: Any) -> bool:
        return user.subscription_plan in UNLIMITED_PLANS

    def can_create_request(self, user: Any) -> Decision:
        if self.is_unlimited(user):
            return Decision(allowed=True)
        if (user.requests_remaining or 0) > 0:
            return Decision(allowed=True)
        return Decision(
            allowed=False,
            reason="You have no requests remaining. Please upgrade or wait for renewal.",
        )

    def _plan_amount(self, plan: str | None) -> int | None:
        if plan == MONTHLY_PLAN:
            return self._settings.monthly_plan_requests
        if plan == ANNUAL_PLAN:
            return self._settings.annual_plan_requests
        return None

    def monthly_quota(self, user: Any) -> Quota | None:
        """Quota granted on each renewal, or None when nothing is allocated."""
        if user.gender == Gender.FEMALE.value:
            return Quota(amount=self._settings.female_monthly_requests, rollover=False)
        if user.subscription_status != SUBSCRIPTION_ACTIVE or self.is_unlimited(user):
            return None
        amount = self._plan_amount(user.subscription_plan)
        if amount is None:
            return None
        return Quota(amount=amount, rollover=True)

    def initial_quota(self, user: Any) -> Quota | None:
        """First allocation (signup for female members, subscription activation for male members). Always a reset."""
        if user.gender == Gender.FEMALE.value:
            return Quota(amount=self._settings.female_monthly_requests, rollover=False)
        if user.subscription_status != SUBSCRIPTION_ACTIVE or self.is_unlimited(user):
            return None
        amount = self._plan_amount(user.subscription_plan)
        if amount is None:
            return None
        return Quota(amount=amount, rollover=False)

    def snapshot(self, user: Any) -> EntitlementState:
        decision = self.can_create_request(user)
        return EntitlementState(
            is_freemium=self.is_freemium(user),
            unlimited=self.is_unlimited(user),
            can_respond=self.can_respond_to_request(user),
            can_create=decision.allowed,
            requests_remaining=user.requests_remaining or 0,
            reason=decision.reason,
        )


@lru_cache
def get_entitlement_policy() -> EntitlementPolicy:
    return EntitlementPolicy()
