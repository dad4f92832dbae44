from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gym_access.api.deps import get_db, require_member
from gym_access.config import get_settings
from gym_access.models import (
    AssignmentStatus,
    AssignmentType,
    Membership,
    Notification,
    NotificationAudience,
    TrainerAssignment,
)
from gym_access.schemas import (
    MembershipRenewalResponse,
    RenewalEligibilityResponse,
    TrainerAssignmentResponse,
    TrainerRenewalRequest,
    TrainerRenewalResponse,
)
from gym_access.services.auth import TokenData
from gym_access.services.eligibility import check_trainer_renewal, evaluate_renewals, select_renewal_badge
from gym_access.services.membership_access import can_purchase_new_plan, can_submit_payment, membership_snapshot
from gym_access.services.plan_period import base_plan_type, max_trainer_renewal_days, trainer_renewal_end
from gym_access.utils.time import utcnow

router = APIRouter(prefix="/memberships", tags=["memberships"])


def get_own_membership_or_404(db: Session, membership_id: int, user_id: str) -> Membership:
    membership = (
        db.query(Membership)
        .filter(Membership.id == membership_id, Membership.user_id == user_id)
        .first()
    )
    if not membership:
        raise HTTPException(status_code=404, detail="Membership not found")
    return membership


def serialize_assignment(assignment: TrainerAssignment) -> TrainerAssignmentResponse:
    return TrainerAssignmentResponse(
        id=assignment.id,
        membership_id=assignment.membership_id,
        trainer_id=assignment.trainer_id,
        assignment_type=assignment.assignment_type.value,
        status=assignment.status.value,
        period_start=assignment.period_start,
        period_end=assignment.period_end,
        requested_by_user=assignment.requested_by_user,
    )


@router.get("/{membership_id}/renewal-eligibility", response_model=RenewalEligibilityResponse)
def renewal_eligibility(
    membership_id: int,
    token: TokenData = Depends(require_member),
    db: Session = Depends(get_db),
) -> RenewalEligibilityResponse:
    membership = get_own_membership_or_404(db, membership_id, token.subject)
    now = utcnow()
    snapshot = membership_snapshot(membership)
    eligibility = evaluate_renewals(snapshot, now, min_plan_days=get_settings().min_trainer_renewal_days)
    badge = select_renewal_badge(eligibility)
    membership_end = snapshot.membership.period_end

    return RenewalEligibilityResponse(
        membership_id=membership.id,
        status=membership.status.value,
        plan_type=base_plan_type(membership.plan_name),
        can_purchase_new_plan=can_purchase_new_plan(membership.status),
        can_submit_payment=can_submit_payment(membership.status),
        membership_renewal=MembershipRenewalResponse(
            is_eligible=eligibility.membership_renewal.is_eligible,
            reason=eligibility.membership_renewal.reason,
            grace_period_days_remaining=eligibility.membership_renewal.grace_period_days_remaining,
        ),
        trainer_renewal=TrainerRenewalResponse(
            is_eligible=eligibility.trainer_renewal.is_eligible,
            reason=eligibility.trainer_renewal.reason,
            is_in_grace_period=eligibility.trainer_renewal.is_in_grace_period,
            grace_period_days_remaining=eligibility.trainer_renewal.grace_period_days_remaining,
            remaining_plan_days=eligibility.trainer_renewal.remaining_plan_days,
        ),
        max_trainer_renewal_days=(
            max_trainer_renewal_days(membership_end, now) if membership_end is not None else None
        ),
        badge=badge.value if badge else None,
        server_time=now,
    )


@router.post("/{membership_id}/renew-trainer", response_model=TrainerAssignmentResponse, status_code=201)
def request_trainer_renewal(
    membership_id: int,
    payload: TrainerRenewalRequest,
    token: TokenData = Depends(require_member),
    db: Session = Depends(get_db),
) -> TrainerAssignmentResponse:
    membership = get_own_membership_or_404(db, membership_id, token.subject)
    now = utcnow()
    snapshot = membership_snapshot(membership)

    verdict = check_trainer_renewal(
        snapshot.membership.status,
        snapshot.trainer.trainer_assigned,
        snapshot.trainer.period_end,
        snapshot.trainer.grace_period_end,
        snapshot.membership.period_end,
        now,
        min_plan_days=get_settings().min_trainer_renewal_days,
    )
    if not verdict.is_eligible:
        raise HTTPException(status_code=400, detail=verdict.reason)

    pending = (
        db.query(TrainerAssignment)
        .filter(
            TrainerAssignment.membership_id == membership.id,
            TrainerAssignment.assignment_type == AssignmentType.renewal,
            TrainerAssignment.status == AssignmentStatus.pending,
        )
        .first()
    )
    if pending:
        raise HTTPException(status_code=409, detail="A trainer renewal request is already pending")

    assignment = TrainerAssignment(
        membership_id=membership.id,
        trainer_id=membership.trainer_id,
        user_id=membership.user_id,
        assignment_type=AssignmentType.renewal,
        status=AssignmentStatus.pending,
        period_start=now,
        period_end=trainer_renewal_end(now, payload.duration_months, snapshot.membership.period_end),
        duration_months=payload.duration_months,
        requested_by_user=True,
    )
    db.add(assignment)
    db.add(
        Notification(
            audience=NotificationAudience.admin,
            notification_type="trainer_renewal_requested",
            content=f"Trainer renewal requested for {membership.plan_name} membership.",
            reference_id=str(membership.id),
        )
    )
    db.commit()
    db.refresh(assignment)
    return serialize_assignment(assignment)
