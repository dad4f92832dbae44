from dataclasses import dataclass
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from gym_access.services.time_window import days_until
from gym_access.utils.time import ensure_utc

INHERENTLY_IN_GYM_PLANS = ("regular monthly", "regular", "regular monthly boys", "regular monthly girls")


@dataclass(frozen=True)
class PlanPeriodSpec:
    plan_name: str
    plan_mode: str = "online"
    has_addon: bool = False
    duration_months: int | None = None


@dataclass(frozen=True)
class TrainerPeriod:
    period_start: datetime
    period_end: datetime
    is_included: bool
    is_addon: bool

    @property
    def assignment_type(self) -> str:
        return "included" if self.is_included else "addon"


def add_months(value: datetime, months: int) -> datetime:
    # relativedelta clamps to the last day of the target month (Jan 31 + 1 month -> Feb 28/29).
    return value + relativedelta(months=months)


def is_regular_monthly_plan(plan_name: str | None) -> bool:
    name = (plan_name or "").lower()
    return "regular" in name and ("monthly" in name or "boys" in name or "girls" in name)


def is_in_gym_addon_available(plan_name: str | None) -> bool:
    name = (plan_name or "").lower()
    return not any(plan in name for plan in INHERENTLY_IN_GYM_PLANS)


def base_plan_type(plan_name: str | None) -> str:
    return "online" if is_in_gym_addon_available(plan_name) else "in_gym"


def is_requested_by_user(spec: PlanPeriodSpec) -> bool:
    plan = spec.plan_name.lower()
    if plan == "elite":
        return True
    return spec.has_addon


def compute_trainer_period(membership_start: datetime, spec: PlanPeriodSpec) -> TrainerPeriod:
    """Derive the trainer access window granted by a plan tier and its addon.

    Included days are applied before months; the two are not commutative
    across months of different lengths.
    """
    plan = spec.plan_name.lower()
    included_days = 0
    included_months = 0
    addon_months = 0

    if plan == "basic":
        if spec.has_addon:
            addon_months = 1
    elif plan == "premium":
        included_days = 7
        if spec.has_addon:
            addon_months = 1
    elif plan == "elite":
        included_months = 1
        if spec.has_addon:
            addon_months = 1
    elif spec.has_addon:
        # Regular plans: the addon follows the membership's own validity.
        addon_months = spec.duration_months if spec.duration_months and spec.duration_months > 0 else 1

    period_start = ensure_utc(membership_start)
    period_end = period_start
    if included_days > 0:
        period_end = period_end + timedelta(days=included_days)
    total_months = included_months + addon_months
    if total_months > 0:
        period_end = add_months(period_end, total_months)

    return TrainerPeriod(
        period_start=period_start,
        period_end=period_end,
        is_included=included_days > 0 or included_months > 0,
        is_addon=addon_months > 0,
    )


def max_trainer_renewal_days(membership_end: datetime, now: datetime) -> int:
    return max(0, days_until(membership_end, now))


def trainer_renewal_end(renewal_start: datetime, months: int, membership_end: datetime) -> datetime:
    """End of a renewed trainer period, capped at the membership end."""
    proposed = add_months(ensure_utc(renewal_start), months)
    membership_end = ensure_utc(membership_end)
    return proposed if proposed <= membership_end else membership_end
