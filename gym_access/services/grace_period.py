from dataclasses import dataclass
from datetime import datetime, timedelta

from gym_access.services.time_window import classify_window, days_until
from gym_access.utils.time import ensure_utc

MEMBERSHIP_GRACE_PERIOD_DAYS = 15
TRAINER_GRACE_PERIOD_DAYS = 5
MIN_TRAINER_RENEWAL_DAYS = 30
EXPIRATION_WARNING_DAYS = 7
GRACE_NOTIFICATION_MILESTONES = (15, 7, 2, 1)


@dataclass(frozen=True)
class ExpirationStatus:
    is_expiring_soon: bool
    is_expired: bool
    days_remaining: int | None


def grace_period_end_for(period_end: datetime, grace_days: int = MEMBERSHIP_GRACE_PERIOD_DAYS) -> datetime:
    return ensure_utc(period_end) + timedelta(days=grace_days)


def should_enter_grace_period(
    status: str,
    period_end: datetime | None,
    grace_period_end: datetime | None,
    now: datetime,
) -> bool:
    if status != "active" or period_end is None:
        return False
    return ensure_utc(period_end) <= ensure_utc(now) and grace_period_end is None


def should_enter_trainer_grace_period(
    trainer_period_end: datetime | None,
    trainer_grace_period_end: datetime | None,
    now: datetime,
) -> bool:
    if trainer_period_end is None:
        return False
    return ensure_utc(trainer_period_end) <= ensure_utc(now) and trainer_grace_period_end is None


def grace_milestone_due(grace_period_end: datetime, now: datetime) -> int | None:
    remaining = days_until(grace_period_end, now)
    if remaining in GRACE_NOTIFICATION_MILESTONES:
        return remaining
    return None


def should_reactivate_membership(status: str, grace_period_end: datetime | None, now: datetime) -> bool:
    """A renewal paid during the grace period revives the same membership row."""
    if status != "grace_period" or grace_period_end is None:
        return False
    return days_until(grace_period_end, now) > 0


def expiration_status(
    end: datetime | None,
    now: datetime,
    warning_days: int = EXPIRATION_WARNING_DAYS,
) -> ExpirationStatus:
    """Compare calendar days in UTC, ignoring the time of day."""
    if end is None:
        return ExpirationStatus(is_expiring_soon=False, is_expired=False, days_remaining=None)

    diff_days = (ensure_utc(end).date() - ensure_utc(now).date()).days
    if diff_days < 0:
        return ExpirationStatus(is_expiring_soon=False, is_expired=True, days_remaining=abs(diff_days))
    if diff_days <= warning_days:
        return ExpirationStatus(is_expiring_soon=True, is_expired=False, days_remaining=diff_days)
    return ExpirationStatus(is_expiring_soon=False, is_expired=False, days_remaining=diff_days)


def trainer_access_state(
    trainer_assigned: bool,
    trainer_period_end: datetime | None,
    trainer_grace_period_end: datetime | None,
    now: datetime,
) -> str:
    if not trainer_assigned or trainer_period_end is None:
        return "none"
    window = classify_window(trainer_period_end, trainer_grace_period_end, now)
    if window.is_active:
        return "active"
    if window.is_in_grace_period:
        return "grace_period"
    return "expired"
