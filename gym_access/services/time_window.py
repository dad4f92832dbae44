import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from gym_access.utils.time import ensure_utc

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class WindowState:
    is_active: bool
    is_expired: bool
    is_in_grace_period: bool
    days_remaining: int | None = None


def days_until(target: datetime, now: datetime) -> int:
    """Whole days from ``now`` to ``target``, rounded up. Negative once ``target`` has passed."""
    return math.ceil((ensure_utc(target) - ensure_utc(now)) / ONE_DAY)


def classify_window(
    period_end: datetime | None,
    grace_period_end: datetime | None,
    now: datetime,
) -> WindowState:
    """Classify an access window as active, expired, or expired but inside its grace window.

    A ``period_end`` equal to ``now`` counts as expired. A missing ``period_end``
    is an expired window with no grace period.
    """
    if period_end is None:
        return WindowState(is_active=False, is_expired=True, is_in_grace_period=False)

    now = ensure_utc(now)
    period_end = ensure_utc(period_end)
    grace_period_end = ensure_utc(grace_period_end)

    if period_end > now:
        return WindowState(is_active=True, is_expired=False, is_in_grace_period=False)

    in_grace = grace_period_end is not None and now <= grace_period_end
    days_remaining = max(0, days_until(grace_period_end, now)) if in_grace else None
    return WindowState(
        is_active=False,
        is_expired=True,
        is_in_grace_period=in_grace,
        days_remaining=days_remaining,
    )
