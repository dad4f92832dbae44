"""Time-driven membership and trainer transitions.

The sweep applies the grace-period rules to every membership row and records
the resulting notifications. It never reads the clock itself: callers (the
admin endpoint or ``scripts/check_expiries.py``) pass ``now``.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from gym_access.models import (
    AssignmentStatus,
    Membership,
    MembershipStatus,
    Notification,
    NotificationAudience,
    Trainer,
    TrainerAssignment,
)
from gym_access.services.grace_period import (
    MEMBERSHIP_GRACE_PERIOD_DAYS,
    TRAINER_GRACE_PERIOD_DAYS,
    grace_milestone_due,
    grace_period_end_for,
    should_enter_grace_period,
    should_enter_trainer_grace_period,
)
from gym_access.services.plan_period import is_regular_monthly_plan
from gym_access.services.time_window import classify_window
from gym_access.utils.time import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_DAYS = 4


@dataclass
class SweepResult:
    expiring_memberships: int = 0
    expiring_trainer_periods: int = 0
    entered_grace_period: int = 0
    grace_reminders: int = 0
    expired_memberships: int = 0
    trainer_grace_started: int = 0
    expired_trainer_periods: int = 0
    notifications_created: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class _Notifier:
    def __init__(self, db: Session, result: SweepResult) -> None:
        self.db = db
        self.result = result

    def send(
        self,
        audience: NotificationAudience,
        recipient_id: str | None,
        notification_type: str,
        content: str,
        reference_id: int | None = None,
    ) -> None:
        self.db.add(
            Notification(
                audience=audience,
                recipient_id=recipient_id,
                notification_type=notification_type,
                content=content,
                reference_id=str(reference_id) if reference_id is not None else None,
            )
        )
        self.result.notifications_created += 1

    def trainer(self, trainer: Trainer | None, notification_type: str, content: str, reference_id: int) -> None:
        if trainer is not None and trainer.user_id:
            self.send(NotificationAudience.trainer, trainer.user_id, notification_type, content, reference_id)


def _within(end: datetime | None, now: datetime, horizon: datetime) -> bool:
    end = ensure_utc(end)
    return end is not None and now < end <= horizon


def _sweep_membership(
    membership: Membership,
    now: datetime,
    horizon: datetime,
    membership_grace_days: int,
    notify: _Notifier,
) -> None:
    result = notify.result
    status = membership.status.value
    entered_grace = False

    if status == MembershipStatus.active.value and _within(membership.membership_end, now, horizon):
        result.expiring_memberships += 1
        notify.send(
            NotificationAudience.member,
            membership.user_id,
            "membership_expiring",
            f"Your {membership.plan_name} membership will expire soon. Please renew.",
            membership.id,
        )
        notify.send(
            NotificationAudience.admin,
            None,
            "membership_expiring",
            f"User's {membership.plan_name} membership is ending soon.",
            membership.id,
        )

    if should_enter_grace_period(status, membership.membership_end, membership.grace_period_end, now):
        membership.status = MembershipStatus.grace_period
        membership.grace_period_end = grace_period_end_for(membership.membership_end, membership_grace_days)
        status = membership.status.value
        entered_grace = True
        result.entered_grace_period += 1
        notify.send(
            NotificationAudience.member,
            membership.user_id,
            "membership_grace_period",
            (
                f"Your {membership.plan_name} membership has ended. You have {membership_grace_days} days "
                "to renew before it expires."
            ),
            membership.id,
        )

    if status != MembershipStatus.grace_period.value or membership.grace_period_end is None:
        return

    window = classify_window(membership.membership_end, membership.grace_period_end, now)
    if window.is_in_grace_period:
        # The grace-entry notice stands in for a reminder on the day grace starts.
        milestone = None if entered_grace else grace_milestone_due(membership.grace_period_end, now)
        if milestone is not None:
            result.grace_reminders += 1
            notify.send(
                NotificationAudience.member,
                membership.user_id,
                "membership_grace_reminder",
                (
                    f"{milestone} day{'' if milestone == 1 else 's'} left to renew your "
                    f"{membership.plan_name} membership."
                ),
                membership.id,
            )
        return

    membership.status = MembershipStatus.expired
    result.expired_memberships += 1
    notify.send(
        NotificationAudience.member,
        membership.user_id,
        "membership_expired",
        f"Your {membership.plan_name} membership has expired. Please renew your plan.",
        membership.id,
    )
    notify.send(
        NotificationAudience.admin,
        None,
        "membership_expired",
        f"User's {membership.plan_name} membership has expired. Please remove or follow up.",
        membership.id,
    )


def _unassign_trainer(db: Session, membership: Membership) -> None:
    membership.trainer_assigned = False
    membership.trainer_id = None
    membership.trainer_period_end = None
    membership.trainer_grace_period_end = None
    (
        db.query(TrainerAssignment)
        .filter(
            TrainerAssignment.membership_id == membership.id,
            TrainerAssignment.status == AssignmentStatus.assigned,
        )
        .update({TrainerAssignment.status: AssignmentStatus.expired}, synchronize_session=False)
    )


def _sweep_trainer(
    db: Session,
    membership: Membership,
    now: datetime,
    horizon: datetime,
    trainer_grace_days: int,
    notify: _Notifier,
) -> None:
    if not membership.trainer_assigned:
        return

    result = notify.result
    trainer = db.get(Trainer, membership.trainer_id) if membership.trainer_id else None

    # Regular Monthly trainer access ends with the membership, with no trainer grace.
    membership_end = ensure_utc(membership.membership_end)
    regular_monthly_lapsed = (
        is_regular_monthly_plan(membership.plan_name) and membership_end is not None and membership_end <= now
    )

    if not regular_monthly_lapsed:
        if _within(membership.trainer_period_end, now, horizon):
            result.expiring_trainer_periods += 1
            notify.send(
                NotificationAudience.member,
                membership.user_id,
                "trainer_period_expiring",
                "Your trainer access period will expire soon. Please renew.",
                membership.id,
            )
            notify.trainer(
                trainer,
                "client_trainer_period_expiring",
                "Your client's trainer access period is expiring soon.",
                membership.id,
            )
            notify.send(
                NotificationAudience.admin,
                None,
                "trainer_period_expiring",
                "User's trainer period is ending soon.",
                membership.id,
            )
            return

        if should_enter_trainer_grace_period(membership.trainer_period_end, membership.trainer_grace_period_end, now):
            membership.trainer_grace_period_end = grace_period_end_for(
                membership.trainer_period_end, trainer_grace_days
            )
            result.trainer_grace_started += 1

        window = classify_window(membership.trainer_period_end, membership.trainer_grace_period_end, now)
        if window.is_active or window.is_in_grace_period:
            return

    _unassign_trainer(db, membership)
    result.expired_trainer_periods += 1
    notify.send(
        NotificationAudience.member,
        membership.user_id,
        "trainer_period_expired",
        "Your trainer access period has expired. Please renew your trainer access.",
        membership.id,
    )
    notify.trainer(trainer, "client_trainer_period_expired", "Client's trainer access period has expired.", membership.id)
    notify.send(
        NotificationAudience.admin, None, "trainer_period_expired", "User's trainer period has expired.", membership.id
    )


def run_expiry_sweep(
    db: Session,
    now: datetime,
    membership_grace_days: int = MEMBERSHIP_GRACE_PERIOD_DAYS,
    trainer_grace_days: int = TRAINER_GRACE_PERIOD_DAYS,
    notification_days: int = DEFAULT_NOTIFICATION_DAYS,
) -> SweepResult:
    now = ensure_utc(now)
    horizon = now + timedelta(days=notification_days)
    result = SweepResult()
    notify = _Notifier(db, result)

    memberships = (
        db.query(Membership)
        .filter(Membership.status.in_([MembershipStatus.active, MembershipStatus.grace_period]))
        .order_by(Membership.id.asc())
        .all()
    )
    for membership in memberships:
        _sweep_membership(membership, now, horizon, membership_grace_days, notify)
        _sweep_trainer(db, membership, now, horizon, trainer_grace_days, notify)

    db.commit()
    logger.info("Expiry sweep at %s: %s", now.isoformat(), result.as_dict())
    return result
