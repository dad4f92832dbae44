from gym_access.models import Membership, MembershipStatus
from gym_access.services.eligibility import MembershipSnapshot, MembershipWindow, TrainerAccessWindow
from gym_access.utils.time import ensure_utc


def _status_value(status: MembershipStatus | str) -> str:
    return status.value if isinstance(status, MembershipStatus) else status


def has_active_access(status: MembershipStatus | str) -> bool:
    return _status_value(status) == MembershipStatus.active.value


def can_purchase_new_plan(status: MembershipStatus | str | None) -> bool:
    # A member in the grace period has to renew the current plan instead.
    if status is None:
        return True
    return _status_value(status) != MembershipStatus.grace_period.value


def can_submit_payment(status: MembershipStatus | str) -> bool:
    return _status_value(status) == MembershipStatus.awaiting_payment.value


def can_approve(status: MembershipStatus | str) -> bool:
    return _status_value(status) == MembershipStatus.pending.value


def membership_snapshot(membership: Membership) -> MembershipSnapshot:
    """Copy the datastore row into the immutable windows the rule set evaluates."""
    return MembershipSnapshot(
        membership=MembershipWindow(
            status=_status_value(membership.status),
            period_start=ensure_utc(membership.membership_start),
            period_end=ensure_utc(membership.membership_end),
            grace_period_end=ensure_utc(membership.grace_period_end),
            plan_name=membership.plan_name,
        ),
        trainer=TrainerAccessWindow(
            trainer_assigned=bool(membership.trainer_assigned),
            trainer_id=membership.trainer_id,
            period_end=ensure_utc(membership.trainer_period_end),
            grace_period_end=ensure_utc(membership.trainer_grace_period_end),
        ),
    )
