from datetime import datetime

from nikkah.models.allocation import AllocationRecord
from nikkah.models.user import User
from nikkah.services.allocation import (
    add_months,
    allocate_for_user,
    apply_subscription_change,
    billing_period,
    grant_initial_allocation,
    next_renewal_date,
    run_monthly_allocation,
)

NOW = datetime(2026, 5, 10, 12, 0, 0)
DUE = datetime(2026, 5, 1, 9, 0, 0)


def _due_member(make_user, **fields):
    fields.setdefault("renewal_date", DUE)
    fields.setdefault("has_received_initial_allocation", True)
    return make_user(**fields)


def test_add_months_clamps_day():
    assert add_months(datetime(2026, 1, 31), 1) == datetime(2026, 2, 28)
    assert add_months(datetime(2026, 11, 15), 3) == datetime(2027, 2, 15)


def test_next_renewal_date_skips_missed_months():
    assert next_renewal_date(datetime(2026, 2, 1), datetime(2026, 5, 10)) == datetime(2026, 6, 1)
    assert next_renewal_date(DUE, NOW) == datetime(2026, 6, 1, 9, 0, 0)


def test_female_allocation_resets_to_three(db, make_user):
    member = _due_member(make_user, gender="female", requests_remaining=1)
    result = allocate_for_user(db, member, NOW)
    assert result.success and not result.skipped
    assert (result.requests_before, result.requests_after) == (1, 3)
    db.refresh(member)
    assert member.requests_remaining == 3
    assert member.renewal_date == datetime(2026, 6, 1, 9, 0, 0)


def test_subscriber_allocation_rolls_over(db, make_user):
    member = _due_member(
        make_user, requests_remaining=4, subscription_status="active", subscription_plan="Annual Plan"
    )
    result = allocate_for_user(db, member, NOW)
    assert result.requests_after == 19
    db.refresh(member)
    assert member.requests_remaining == 19


def test_second_run_in_same_period_changes_nothing(db, make_user):
    member = _due_member(
        make_user, requests_remaining=0, subscription_status="active", subscription_plan="Monthly Plan"
    )
    run_monthly_allocation(db, NOW)
    db.refresh(member)
    assert member.requests_remaining == 10

    # Renewal has moved to June, so the member is no longer due
    assert run_monthly_allocation(db, NOW) == []
    db.refresh(member)
    assert member.requests_remaining == 10


def test_stale_renewal_date_hits_period_key(db, make_user):
    member = _due_member(
        make_user, requests_remaining=0, subscription_status="active", subscription_plan="Monthly Plan"
    )
    allocate_for_user(db, member, NOW)

    # Another worker still holding the old renewal date tries the same period again
    stale = db.query(User).filter(User.id == member.id).one()
    stale.renewal_date = DUE
    db.commit()
    result = allocate_for_user(db, stale, NOW)
    assert result.skipped
    assert result.reason == "Already allocated for this billing period"
    db.refresh(member)
    assert member.requests_remaining == 10
    assert db.query(AllocationRecord).filter(AllocationRecord.billing_period == billing_period(DUE)).count() == 1
    # Renewal still moves on, so the member is not stuck on the same period
    assert result.new_renewal_date == datetime(2026, 6, 1, 9, 0, 0)
    assert member.renewal_date == datetime(2026, 6, 1, 9, 0, 0)


def test_unlimited_and_unknown_plans_are_skipped(db, make_user):
    unlimited = _due_member(make_user, subscription_status="active", subscription_plan="Unlimited Plan")
    unknown = _due_member(make_user, subscription_status="active", subscription_plan="Weekly Plan")
    results = {r.user_id: r for r in run_monthly_allocation(db, NOW)}
    assert results[unlimited.id].skipped
    assert results[unknown.id].reason == "No allocation for this plan"
    db.refresh(unlimited)
    assert unlimited.renewal_date == DUE


def test_eligibility_filters(db, make_user):
    not_due = _due_member(make_user, gender="female", renewal_date=datetime(2026, 6, 1))
    no_initial = _due_member(make_user, gender="female", has_received_initial_allocation=False)
    freemium = _due_member(make_user, gender="male")
    due = _due_member(make_user, gender="female")
    ids = [r.user_id for r in run_monthly_allocation(db, NOW)]
    assert ids == [due.id]
    assert not_due.id not in ids and no_initial.id not in ids and freemium.id not in ids


def test_initial_allocation_for_female_happens_once(db, make_user):
    member = make_user(gender="female")
    record = grant_initial_allocation(db, member, NOW)
    db.commit()
    assert record.amount == 3
    db.refresh(member)
    assert member.requests_remaining == 3
    assert member.has_received_initial_allocation
    assert member.renewal_date == datetime(2026, 6, 10, 12, 0, 0)

    assert grant_initial_allocation(db, member, NOW) is None


def test_subscription_activation_grants_plan_quota(db, make_user):
    member = make_user(gender="male")
    assert grant_initial_allocation(db, member, NOW) is None

    apply_subscription_change(db, member, "active", "Monthly Plan", now=NOW)
    assert member.requests_remaining == 10
    assert member.has_received_initial_allocation

    # Renewal payment later does not re-grant
    apply_subscription_change(db, member, "active", "Annual Plan", now=NOW)
    assert member.requests_remaining == 10


def test_renewal_moved_inside_allocated_period_recovers_next_month(db, make_user):
    member = _due_member(
        make_user, requests_remaining=0, subscription_status="active", subscription_plan="Monthly Plan"
    )
    allocate_for_user(db, member, NOW)
    # Processor moves the renewal back inside the period that was just paid out
    apply_subscription_change(db, member, "active", "Monthly Plan", renewal_date=datetime(2026, 5, 20), now=NOW)

    skipped = run_monthly_allocation(db, datetime(2026, 5, 21))
    assert [r.skipped for r in skipped] == [True]
    db.refresh(member)
    assert member.requests_remaining == 10
    assert member.renewal_date == datetime(2026, 6, 20)

    run_monthly_allocation(db, datetime(2026, 6, 25))
    db.refresh(member)
    assert member.requests_remaining == 20
    assert member.renewal_date == datetime(2026, 7, 20)

    run_monthly_allocation(db, datetime(2026, 7, 25))
    db.refresh(member)
    assert member.requests_remaining == 30


def test_activation_keeps_processor_renewal_date(db, make_user):
    member = make_user(gender="male")
    apply_subscription_change(
        db, member, "active", "Monthly Plan", renewal_date=datetime(2026, 12, 1), now=NOW
    )
    assert member.requests_remaining == 10
    assert member.renewal_date == datetime(2026, 12, 1)
    assert member.renewal_day == 1


def test_activation_without_renewal_date_renews_in_a_month(db, make_user):
    member = make_user(gender="male", renewal_date=datetime(2026, 1, 1))
    apply_subscription_change(db, member, "active", "Monthly Plan", now=NOW)
    assert member.renewal_date == datetime(2026, 6, 10, 12, 0, 0)
    assert member.renewal_day == 10


def test_next_renewal_date_returns_to_anchor_day():
    assert next_renewal_date(datetime(2026, 2, 28), datetime(2026, 3, 1), anchor_day=31) == datetime(2026, 3, 31)
    assert next_renewal_date(datetime(2026, 2, 28), datetime(2026, 3, 1)) == datetime(2026, 3, 28)


def test_end_of_month_renewal_keeps_its_day(db, make_user):
    member = _due_member(make_user, gender="female", renewal_date=datetime(2026, 1, 31), renewal_day=31)
    run_monthly_allocation(db, datetime(2026, 2, 1))
    db.refresh(member)
    assert member.renewal_date == datetime(2026, 2, 28)

    run_monthly_allocation(db, datetime(2026, 3, 1))
    db.refresh(member)
    assert member.renewal_date == datetime(2026, 3, 31)
