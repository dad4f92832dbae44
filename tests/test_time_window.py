from datetime import datetime, timedelta, timezone

from gym_access.services.time_window import classify_window, days_until

NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


def test_missing_period_end_is_expired_without_grace():
    state = classify_window(None, NOW + timedelta(days=5), NOW)

    assert state.is_active is False
    assert state.is_expired is True
    assert state.is_in_grace_period is False
    assert state.days_remaining is None


def test_period_end_equal_to_now_is_expired():
    state = classify_window(NOW, None, NOW)

    assert state.is_active is False
    assert state.is_expired is True


def test_future_period_end_is_active():
    state = classify_window(NOW + timedelta(seconds=1), NOW + timedelta(days=5), NOW)

    assert state.is_active is True
    assert state.is_expired is False
    assert state.is_in_grace_period is False
    assert state.days_remaining is None


def test_grace_days_remaining_rounds_up():
    state = classify_window(NOW - timedelta(days=1), NOW + timedelta(hours=36), NOW)

    assert state.is_expired is True
    assert state.is_in_grace_period is True
    assert state.days_remaining == 2


def test_grace_end_equal_to_now_is_still_in_grace():
    state = classify_window(NOW - timedelta(days=5), NOW, NOW)

    assert state.is_in_grace_period is True
    assert state.days_remaining == 0


def test_elapsed_grace_window():
    state = classify_window(NOW - timedelta(days=5), NOW - timedelta(seconds=1), NOW)

    assert state.is_expired is True
    assert state.is_in_grace_period is False
    assert state.days_remaining is None


def test_naive_datetimes_are_treated_as_utc():
    state = classify_window(datetime(2025, 1, 11), None, NOW)

    assert state.is_active is True


def test_active_and_expired_are_exclusive():
    for hours in range(-72, 73, 6):
        period_end = NOW + timedelta(hours=hours)
        state = classify_window(period_end, period_end + timedelta(days=2), NOW)

        assert state.is_active != state.is_expired
        assert not (state.is_active and state.is_in_grace_period)


def test_days_until_is_negative_after_target():
    assert days_until(NOW + timedelta(days=45), NOW) == 45
    assert days_until(NOW + timedelta(hours=1), NOW) == 1
    assert days_until(NOW - timedelta(days=2), NOW) == -2
