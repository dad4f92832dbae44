"""Renewal and trainer-messaging eligibility rules.

Every check takes the evaluation instant explicitly and returns a verdict
instead of raising; negative verdicts carry a reason the caller can show.
Membership renewal and trainer renewal are mutually exclusive: the first needs
a membership in its grace period, the second an active one.
"""

import enum
from dataclasses import dataclass
from datetime import datetime

from gym_access.services.grace_period import MIN_TRAINER_RENEWAL_DAYS
from gym_access.services.plan_period import is_regular_monthly_plan
from gym_access.services.time_window import classify_window, days_until
from gym_access.utils.time import ensure_utc


class RenewalBadge(str, enum.Enum):
    membership_renewal = "membership_renewal"
    trainer_renewal = "trainer_renewal"


@dataclass(frozen=True)
class MembershipWindow:
    status: str
    period_start: datetime | None
    period_end: datetime | None
    grace_period_end: datetime | None
    plan_name: str


@dataclass(frozen=True)
class TrainerAccessWindow:
    trainer_assigned: bool
    trainer_id: str | None
    period_end: datetime | None
    grace_period_end: datetime | None


@dataclass(frozen=True)
class MembershipSnapshot:
    membership: MembershipWindow
    trainer: TrainerAccessWindow


@dataclass(frozen=True)
class MembershipRenewalVerdict:
    is_eligible: bool
    reason: str | None = None
    grace_period_days_remaining: int | None = None


@dataclass(frozen=True)
class TrainerRenewalVerdict:
    is_eligible: bool
    reason: str | None = None
    is_in_grace_period: bool = False
    grace_period_days_remaining: int | None = None
    remaining_plan_days: int | None = None


@dataclass(frozen=True)
class RenewalEligibility:
    membership_renewal: MembershipRenewalVerdict
    trainer_renewal: TrainerRenewalVerdict


@dataclass(frozen=True)
class TrainerAccessVerdict:
    can_message: bool
    is_active: bool
    is_expired: bool
    is_in_grace_period: bool
    reason: str
    grace_period_days_remaining: int | None = None


def check_membership_renewal(
    status: str,
    period_end: datetime | None,
    grace_period_end: datetime | None,
    now: datetime,
) -> MembershipRenewalVerdict:
    if status != "grace_period":
        return MembershipRenewalVerdict(
            is_eligible=False,
            reason=(
                f"Membership status is '{status}'. "
                "Membership renewal is only available during the grace period."
            ),
        )

    if grace_period_end is None:
        return MembershipRenewalVerdict(
            is_eligible=False,
            reason="Grace period end date is missing. Cannot determine membership renewal eligibility.",
        )

    window = classify_window(period_end, grace_period_end, now)
    if not window.is_in_grace_period:
        return MembershipRenewalVerdict(
            is_eligible=False,
            reason="Grace period has ended. Membership can no longer be renewed.",
        )

    return MembershipRenewalVerdict(is_eligible=True, grace_period_days_remaining=window.days_remaining)


def check_trainer_renewal(
    status: str,
    trainer_assigned: bool,
    trainer_period_end: datetime | None,
    trainer_grace_period_end: datetime | None,
    membership_end: datetime | None,
    now: datetime,
    min_plan_days: int = MIN_TRAINER_RENEWAL_DAYS,
) -> TrainerRenewalVerdict:
    if status != "active":
        return TrainerRenewalVerdict(
            is_eligible=False,
            reason=f"Membership status is '{status}'. Trainer renewal requires an active membership.",
        )

    if not trainer_assigned:
        return TrainerRenewalVerdict(
            is_eligible=False,
            reason="No trainer is assigned to this membership. Trainer renewal is not applicable.",
        )

    if trainer_period_end is None:
        return TrainerRenewalVerdict(
            is_eligible=False,
            reason="Trainer period end date is missing. Cannot determine trainer renewal eligibility.",
        )

    window = classify_window(trainer_period_end, trainer_grace_period_end, now)
    if not window.is_expired:
        return TrainerRenewalVerdict(
            is_eligible=False,
            reason=(
                f"Trainer period is still active (ends {trainer_period_end.date().isoformat()}). "
                "Renewal is not yet available."
            ),
        )

    if membership_end is None:
        return TrainerRenewalVerdict(
            is_eligible=False,
            reason="Membership end date is missing. Cannot calculate remaining plan duration.",
            is_in_grace_period=window.is_in_grace_period,
        )

    remaining_plan_days = days_until(membership_end, now)
    if remaining_plan_days < min_plan_days:
        return TrainerRenewalVerdict(
            is_eligible=False,
            reason=(
                f"Remaining plan duration is {remaining_plan_days} days. Trainer renewal requires "
                f"at least {min_plan_days} days remaining on your membership."
            ),
            is_in_grace_period=window.is_in_grace_period,
            remaining_plan_days=remaining_plan_days,
        )

    return TrainerRenewalVerdict(
        is_eligible=True,
        is_in_grace_period=window.is_in_grace_period,
        grace_period_days_remaining=window.days_remaining,
        remaining_plan_days=remaining_plan_days,
    )


def evaluate_renewals(
    snapshot: MembershipSnapshot,
    now: datetime,
    min_plan_days: int = MIN_TRAINER_RENEWAL_DAYS,
) -> RenewalEligibility:
    membership = snapshot.membership
    trainer = snapshot.trainer
    return RenewalEligibility(
        membership_renewal=check_membership_renewal(
            membership.status, membership.period_end, membership.grace_period_end, now
        ),
        trainer_renewal=check_trainer_renewal(
            membership.status,
            trainer.trainer_assigned,
            trainer.period_end,
            trainer.grace_period_end,
            membership.period_end,
            now,
            min_plan_days=min_plan_days,
        ),
    )


def select_renewal_badge(eligibility: RenewalEligibility) -> RenewalBadge | None:
    # A lapsed membership has to be renewed before trainer renewal is offered.
    if eligibility.membership_renewal.is_eligible:
        return RenewalBadge.membership_renewal
    if eligibility.trainer_renewal.is_eligible:
        return RenewalBadge.trainer_renewal
    return None


def check_trainer_messaging_access(
    trainer_period_end: datetime | None,
    trainer_grace_period_end: datetime | None,
    now: datetime,
    membership_end: datetime | None = None,
    plan_name: str | None = None,
) -> TrainerAccessVerdict:
    """Messaging requires a strictly active trainer period; the grace period only allows renewal."""
    regular_monthly = is_regular_monthly_plan(plan_name)

    # TODO: confirm with product whether Regular Monthly plans should get the trainer grace period too.
    if regular_monthly and membership_end is not None and ensure_utc(membership_end) <= ensure_utc(now):
        return TrainerAccessVerdict(
            can_message=False,
            is_active=False,
            is_expired=True,
            is_in_grace_period=False,
            reason=(
                "Your Regular Monthly membership has expired. Trainer access has been revoked. "
                "Please renew your membership and add trainer access as an addon."
            ),
        )

    if trainer_period_end is None:
        return TrainerAccessVerdict(
            can_message=False,
            is_active=False,
            is_expired=True,
            is_in_grace_period=False,
            reason="No trainer access period found. Please purchase or renew trainer access.",
        )

    window = classify_window(
        trainer_period_end,
        None if regular_monthly else trainer_grace_period_end,
        now,
    )

    if window.is_active:
        reason = "Trainer access is active. You can message your trainer."
    elif window.is_in_grace_period:
        days = window.days_remaining
        reason = (
            f"Trainer access expired. Grace period active ({days} day{'' if days == 1 else 's'} remaining). "
            "Please renew to continue messaging."
        )
    else:
        reason = "Trainer access period has expired. Please renew your trainer access to continue messaging."

    return TrainerAccessVerdict(
        can_message=window.is_active,
        is_active=window.is_active,
        is_expired=window.is_expired,
        is_in_grace_period=window.is_in_grace_period,
        reason=reason,
        grace_period_days_remaining=window.days_remaining,
    )


def check_trainer_messaging_access_for_membership(
    snapshot: MembershipSnapshot | None,
    trainer_id: str,
    now: datetime,
) -> TrainerAccessVerdict:
    if snapshot is None or snapshot.trainer.trainer_id != trainer_id:
        return TrainerAccessVerdict(
            can_message=False,
            is_active=False,
            is_expired=True,
            is_in_grace_period=False,
            reason="You do not have an assigned trainer. Please contact admin or purchase trainer access.",
        )

    return check_trainer_messaging_access(
        snapshot.trainer.period_end,
        snapshot.trainer.grace_period_end,
        now,
        membership_end=snapshot.membership.period_end,
        plan_name=snapshot.membership.plan_name,
    )
