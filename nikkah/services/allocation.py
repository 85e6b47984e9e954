"""
Request quota allocation.
- Initial: female members at signup, male members when their subscription becomes active. Always a reset.
- Monthly job: members with an active subscription or female, renewal_date in the past and initial
  allocation received. Female -> reset to quota; Monthly/Annual subscribers -> quota added on top
  (rollover). Unlimited plans are skipped.
Idempotency: the allocation_history row is keyed on (user, billing period, type) and inserted in the
same transaction as the balance update, so a second run for the same period fails on the unique key
and grants nothing. The renewal date still moves forward in that case, otherwise the member would
hit the same key on every later run.
Renewals keep the anchor day in users.renewal_day: a subscription renewing on the 31st renews on
Feb 28, then Mar 31 (not Mar 28).
"""
import calendar
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from nikkah.models.allocation import AllocationRecord, AllocationType
from nikkah.models.user import Gender, User, SUBSCRIPTION_ACTIVE
from nikkah.services.entitlement import EntitlementPolicy, get_entitlement_policy

logger = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    user_id: str
    success: bool
    skipped: bool = False
    reason: str | None = None
    requests_added: int | None = None
    requests_before: int | None = None
    requests_after: int | None = None
    new_renewal_date: datetime | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def add_months(dt: datetime, months: int, anchor_day: int | None = None) -> datetime:
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(anchor_day or dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def billing_period(dt: datetime) -> str:
    return dt.strftime("%Y-%m")


def next_renewal_date(due: datetime, now: datetime, anchor_day: int | None = None) -> datetime:
    """First whole-month step after `due` that lies in the future, on the anchor day when given."""
    months = 1
    nxt = add_months(due, months, anchor_day)
    while nxt <= now:
        months += 1
        nxt = add_months(due, months, anchor_day)
    return nxt


def grant_initial_allocation(
    db: Session,
    user: User,
    now: datetime | None = None,
    policy: EntitlementPolicy | None = None,
) -> AllocationRecord | None:
    """Set the first quota once per member. Does not commit. None if nothing is due."""
    policy = policy or get_entitlement_policy()
    now = now or datetime.utcnow()
    quota = policy.initial_quota(user)
    if quota is None:
        return None
    before = user.requests_remaining or 0
    # A future renewal date written by the payment processor wins
    if user.renewal_date is not None and user.renewal_date > now:
        renewal = user.renewal_date
    else:
        renewal = add_months(now, 1)
    updated = (
        db.query(User)
        .filter(User.id == user.id, User.has_received_initial_allocation == False)  # noqa: E712
        .update(
            {
                User.requests_remaining: quota.amount,
                User.has_received_initial_allocation: True,
                User.renewal_date: renewal,
                User.renewal_day: renewal.day,
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        return None
    record = AllocationRecord(
        user_id=user.id,
        billing_period=billing_period(now),
        allocation_type=AllocationType.INITIAL.value,
        amount=quota.amount,
        previous_amount=before,
        new_amount=quota.amount,
    )
    db.add(record)
    db.flush()
    db.refresh(user)
    logger.info("Initial allocation of %s requests for user %s", quota.amount, user.id)
    return record


def apply_subscription_change(
    db: Session,
    user: User,
    subscription_status: str,
    subscription_plan: str | None,
    renewal_date: datetime | None = None,
    now: datetime | None = None,
) -> User:
    """Write the payment processor's result. First activation grants the initial plan quota."""
    user.subscription_status = subscription_status
    user.subscription_plan = subscription_plan
    if renewal_date is not None:
        if renewal_date.tzinfo is not None:
            renewal_date = renewal_date.astimezone(timezone.utc).replace(tzinfo=None)
        user.renewal_date = renewal_date
        user.renewal_day = renewal_date.day
    db.flush()
    if subscription_status == SUBSCRIPTION_ACTIVE and not user.has_received_initial_allocation:
        grant_initial_allocation(db, user, now)
    db.commit()
    db.refresh(user)
    logger.info("Subscription for user %s set to %s (%s)", user.id, subscription_status, subscription_plan)
    return user


def _advance_renewal(db: Session, user_id: str, due: datetime, new_renewal: datetime) -> None:
    """Move renewal_date forward without granting. Only if nobody changed it meanwhile."""
    db.query(User).filter(User.id == user_id, User.renewal_date == due).update(
        {User.renewal_date: new_renewal},
        synchronize_session=False,
    )
    db.commit()


def allocate_for_user(
    db: Session,
    user: User,
    now: datetime | None = None,
    policy: EntitlementPolicy | None = None,
) -> AllocationResult:
    """Monthly allocation for one member; commits or rolls back its own transaction."""
    policy = policy or get_entitlement_policy()
    now = now or datetime.utcnow()
    user_id = user.id
    quota = policy.monthly_quota(user)
    if quota is None:
        return AllocationResult(user_id=user_id, success=True, skipped=True, reason="No allocation for this plan")
    due = user.renewal_date or now
    period = billing_period(due)
    new_renewal = next_renewal_date(due, now, user.renewal_day)

    try:
        before = db.query(User.requests_remaining).filter(User.id == user_id).scalar() or 0
        after = before + quota.amount if quota.rollover else quota.amount
        db.add(
            AllocationRecord(
                user_id=user_id,
                billing_period=period,
                allocation_type=AllocationType.MONTHLY.value,
                amount=quota.amount,
                previous_amount=before,
                new_amount=after,
            )
        )
        db.flush()
        new_balance = User.requests_remaining + quota.amount if quota.rollover else quota.amount
        db.query(User).filter(User.id == user_id).update(
            {User.requests_remaining: new_balance, User.renewal_date: new_renewal},
            synchronize_session=False,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("User %s already allocated for period %s; moving renewal to %s", user_id, period, new_renewal)
        try:
            _advance_renewal(db, user_id, due, new_renewal)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Could not advance renewal for user %s: %s", user_id, e)
            return AllocationResult(user_id=user_id, success=False, error=str(e))
        return AllocationResult(
            user_id=user_id,
            success=True,
            skipped=True,
            reason="Already allocated for this billing period",
            new_renewal_date=new_renewal,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Allocation failed for user %s: %s", user_id, e)
        return AllocationResult(user_id=user_id, success=False, error=str(e))

    logger.info(
        "Allocated %s requests to user %s (%s, rollover=%s): %s -> %s",
        quota.amount, user_id, period, quota.rollover, before, after,
    )
    return AllocationResult(
        user_id=user_id,
        success=True,
        requests_added=quota.amount,
        requests_before=before,
        requests_after=after,
        new_renewal_date=new_renewal,
    )


def eligible_user_ids(db: Session, now: datetime) -> list[str]:
    rows = (
        db.query(User.id)
        .filter(
            or_(User.subscription_status == SUBSCRIPTION_ACTIVE, User.gender == Gender.FEMALE.value),
            User.renewal_date < now,
            User.has_received_initial_allocation == True,  # noqa: E712
        )
        .all()
    )
    return [r[0] for r in rows]


def run_monthly_allocation(
    db: Session,
    now: datetime | None = None,
    policy: EntitlementPolicy | None = None,
) -> list[AllocationResult]:
    now = now or datetime.utcnow()
    user_ids = eligible_user_ids(db, now)
    logger.info("Found %s eligible users for monthly request allocation", len(user_ids))
    results = []
    for user_id in user_ids:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            continue
        results.append(allocate_for_user(db, user, now, policy))
    return results
