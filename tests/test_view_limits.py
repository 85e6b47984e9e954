from datetime import date, timedelta

import pytest

from nikkah.models.profile_view import ProfileView, ProfileViewCounter
from nikkah.services.errors import ViewLimitReached
from nikkah.services import view_limits
from nikkah.services.view_limits import check_view_allowance, record_profile_view

TODAY = date(2026, 5, 10)


def test_freemium_member_gets_five_distinct_profiles_a_day(db, make_user, freemium_male):
    profiles = [make_user(gender="female") for _ in range(6)]
    for i, profile in enumerate(profiles[:5]):
        allowance = record_profile_view(db, freemium_male, profile.id, today=TODAY)
        assert allowance.views_remaining == 4 - i

    with pytest.raises(ViewLimitReached) as exc:
        record_profile_view(db, freemium_male, profiles[5].id, today=TODAY)
    assert exc.value.upgrade_required

    # Re-opening a profile seen today is free
    assert record_profile_view(db, freemium_male, profiles[0].id, today=TODAY).views_remaining == 0
    # New day, new allowance
    assert record_profile_view(db, freemium_male, profiles[5].id, today=TODAY + timedelta(days=1)).views_remaining == 4


def test_repeat_view_counts_once(db, freemium_male, female):
    record_profile_view(db, freemium_male, female.id, today=TODAY)
    record_profile_view(db, freemium_male, female.id, today=TODAY)
    assert db.query(ProfileView).count() == 1
    assert check_view_allowance(db, freemium_male, today=TODAY).views_remaining == 4


def test_subscribers_and_women_are_not_limited(db, make_user, subscribed_male, female):
    others = [make_user(gender="female") for _ in range(6)]
    for other in others:
        assert record_profile_view(db, subscribed_male, other.id, today=TODAY).views_remaining is None
    assert record_profile_view(db, female, subscribed_male.id, today=TODAY).can_view
    assert db.query(ProfileView).count() == 0


def test_limit_holds_when_count_read_is_stale(db, make_user, freemium_male, monkeypatch):
    profiles = [make_user(gender="female") for _ in range(6)]
    for profile in profiles[:5]:
        record_profile_view(db, freemium_male, profile.id, today=TODAY)

    # A concurrent reader that still saw zero views must not get a sixth
    monkeypatch.setattr(view_limits, "count_views_today", lambda *args, **kwargs: 0)
    with pytest.raises(ViewLimitReached):
        record_profile_view(db, freemium_male, profiles[5].id, today=TODAY)
    assert db.query(ProfileView).count() == 5
    counter = db.query(ProfileViewCounter).filter(ProfileViewCounter.viewer_id == freemium_male.id).one()
    assert counter.view_count == 5


def test_counter_is_per_day(db, freemium_male, female):
    record_profile_view(db, freemium_male, female.id, today=TODAY)
    record_profile_view(db, freemium_male, female.id, today=TODAY + timedelta(days=1))
    counts = {c.view_date: c.view_count for c in db.query(ProfileViewCounter).all()}
    assert counts == {TODAY: 1, TODAY + timedelta(days=1): 1}
