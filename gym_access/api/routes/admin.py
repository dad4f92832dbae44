import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gym_access.api.deps import get_db, require_admin
from gym_access.api.routes.memberships import serialize_assignment
from gym_access.config import get_settings
from gym_access.models import (
    Admin,
    AssignmentStatus,
    AssignmentType,
    AuditLog,
    Membership,
    MembershipStatus,
    Notification,
    NotificationAudience,
    Trainer,
    TrainerAssignment,
)
from gym_access.schemas import (
    AssignTrainerRequest,
    ExpirySweepResponse,
    MembershipRejectRequest,
    MembershipResponse,
    TrainerAssignmentResponse,
)
from gym_access.services.eligibility import evaluate_renewals, select_renewal_badge
from gym_access.services.expiry import run_expiry_sweep
from gym_access.services.grace_period import expiration_status, should_reactivate_membership, trainer_access_state
from gym_access.services.membership_access import (
    can_approve,
    can_submit_payment,
    has_active_access,
    membership_snapshot,
)
from gym_access.services.plan_period import (
    PlanPeriodSpec,
    add_months,
    compute_trainer_period,
    is_requested_by_user,
    trainer_renewal_end,
)
from gym_access.utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def parse_membership_status(value: str) -> MembershipStatus:
    try:
        return MembershipStatus(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid membership status") from exc


def get_membership_or_404(db: Session, membership_id: int) -> Membership:
    membership = db.get(Membership, membership_id)
    if not membership:
        raise HTTPException(status_code=404, detail="Membership not found")
    return membership


def get_active_trainer_or_404(db: Session, trainer_id: str) -> Trainer:
    trainer = db.get(Trainer, trainer_id)
    if not trainer or not trainer.is_active:
        raise HTTPException(status_code=404, detail="Trainer not found")
    return trainer


def plan_spec_for(membership: Membership) -> PlanPeriodSpec:
    return PlanPeriodSpec(
        plan_name=membership.plan_name,
        plan_mode=membership.plan_mode.value,
        has_addon=membership.has_trainer_addon,
        duration_months=membership.duration_months,
    )


def serialize_membership(membership: Membership, now: datetime) -> MembershipResponse:
    snapshot = membership_snapshot(membership)
    badge = select_renewal_badge(
        evaluate_renewals(snapshot, now, min_plan_days=get_settings().min_trainer_renewal_days)
    )
    return MembershipResponse(
        id=membership.id,
        user_id=membership.user_id,
        plan_name=membership.plan_name,
        plan_mode=membership.plan_mode.value,
        duration_months=membership.duration_months,
        has_trainer_addon=membership.has_trainer_addon,
        status=membership.status.value,
        can_submit_payment=can_submit_payment(membership.status),
        membership_start=snapshot.membership.period_start,
        membership_end=snapshot.membership.period_end,
        grace_period_end=snapshot.membership.grace_period_end,
        trainer_assigned=snapshot.trainer.trainer_assigned,
        trainer_id=snapshot.trainer.trainer_id,
        trainer_period_end=snapshot.trainer.period_end,
        trainer_grace_period_end=snapshot.trainer.grace_period_end,
        trainer_access=trainer_access_state(
            snapshot.trainer.trainer_assigned,
            snapshot.trainer.period_end,
            snapshot.trainer.grace_period_end,
            now,
        ),
        expiring_soon=(
            membership.status == MembershipStatus.active
            and expiration_status(snapshot.membership.period_end, now).is_expiring_soon
        ),
        badge=badge.value if badge else None,
    )


def assign_trainer_period(
    db: Session,
    membership: Membership,
    trainer: Trainer,
    period_start: datetime,
    period_end: datetime,
    assignment_type: AssignmentType,
    requested_by_user: bool,
    admin: Admin,
    now: datetime,
) -> TrainerAssignment:
    (
        db.query(TrainerAssignment)
        .filter(
            TrainerAssignment.membership_id == membership.id,
            TrainerAssignment.status == AssignmentStatus.assigned,
        )
        .update({TrainerAssignment.status: AssignmentStatus.expired}, synchronize_session=False)
    )
    membership.trainer_assigned = True
    membership.trainer_id = trainer.id
    membership.trainer_period_end = period_end
    membership.trainer_grace_period_end = None

    assignment = TrainerAssignment(
        membership_id=membership.id,
        trainer_id=trainer.id,
        user_id=membership.user_id,
        assignment_type=assignment_type,
        status=AssignmentStatus.assigned,
        period_start=period_start,
        period_end=period_end,
        requested_by_user=requested_by_user,
        assigned_by=admin.id,
        assigned_at=now,
    )
    db.add(assignment)
    db.add(
        Notification(
            audience=NotificationAudience.member,
            recipient_id=membership.user_id,
            notification_type="trainer_assigned",
            content=f"{trainer.name} has been assigned as your trainer.",
            reference_id=str(membership.id),
        )
    )
    if trainer.user_id:
        db.add(
            Notification(
                audience=NotificationAudience.trainer,
                recipient_id=trainer.user_id,
                notification_type="client_assigned",
                content=f"A new {membership.plan_name} client has been assigned to you.",
                reference_id=str(membership.id),
            )
        )
    return assignment


@router.get("/memberships", response_model=list[MembershipResponse])
def list_memberships(
    status: str | None = None,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[MembershipResponse]:
    query = db.query(Membership)
    if status:
        query = query.filter(Membership.status == parse_membership_status(status))
    now = utcnow()
    memberships = query.order_by(Membership.created_at.desc(), Membership.id.desc()).all()
    return [serialize_membership(membership, now) for membership in memberships]


@router.post("/memberships/{membership_id}/approve", response_model=MembershipResponse)
def approve_membership(
    membership_id: int,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MembershipResponse:
    membership = get_membership_or_404(db, membership_id)
    now = utcnow()
    reactivated = should_reactivate_membership(membership.status.value, membership.grace_period_end, now)
    if not can_approve(membership.status) and not reactivated:
        raise HTTPException(
            status_code=400, detail=f"Membership status is '{membership.status.value}' and cannot be approved"
        )

    membership.status = MembershipStatus.active
    membership.membership_start = now
    membership.membership_end = add_months(now, membership.duration_months or 1)
    membership.grace_period_end = None

    spec = plan_spec_for(membership)
    period = compute_trainer_period(now, spec)
    if (period.is_included or period.is_addon) and membership.requested_trainer_id:
        trainer = db.get(Trainer, membership.requested_trainer_id)
        if trainer and trainer.is_active:
            assign_trainer_period(
                db,
                membership,
                trainer,
                period.period_start,
                period.period_end,
                AssignmentType(period.assignment_type),
                is_requested_by_user(spec),
                admin,
                now,
            )
        else:
            logger.warning(
                "Requested trainer %s unavailable for membership %s", membership.requested_trainer_id, membership.id
            )

    db.add(
        Notification(
            audience=NotificationAudience.member,
            recipient_id=membership.user_id,
            notification_type="membership_renewed" if reactivated else "membership_approved",
            content=f"Your {membership.plan_name} membership is now active.",
            reference_id=str(membership.id),
        )
    )
    db.add(
        AuditLog(
            admin_id=admin.id,
            membership_id=membership.id,
            action="membership_reactivated" if reactivated else "membership_approved",
        )
    )
    db.commit()
    db.refresh(membership)
    logger.info("Membership %s approved by admin %s", membership.id, admin.id)
    return serialize_membership(membership, now)


@router.post("/memberships/{membership_id}/reject", response_model=MembershipResponse)
def reject_membership(
    membership_id: int,
    payload: MembershipRejectRequest,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MembershipResponse:
    membership = get_membership_or_404(db, membership_id)
    if not can_approve(membership.status):
        raise HTTPException(
            status_code=400, detail=f"Membership status is '{membership.status.value}' and cannot be rejected"
        )

    membership.status = MembershipStatus.rejected
    content = f"Your {membership.plan_name} membership payment was rejected."
    if payload.reason:
        content = f"{content} Reason: {payload.reason}"
    db.add(
        Notification(
            audience=NotificationAudience.member,
            recipient_id=membership.user_id,
            notification_type="membership_rejected",
            content=content,
            reference_id=str(membership.id),
        )
    )
    db.add(
        AuditLog(
            admin_id=admin.id,
            membership_id=membership.id,
            action="membership_rejected",
            meta={"reason": payload.reason} if payload.reason else None,
        )
    )
    db.commit()
    db.refresh(membership)
    return serialize_membership(membership, utcnow())


@router.post("/memberships/{membership_id}/assign-trainer", response_model=TrainerAssignmentResponse)
def assign_trainer(
    membership_id: int,
    payload: AssignTrainerRequest,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> TrainerAssignmentResponse:
    membership = get_membership_or_404(db, membership_id)
    if not has_active_access(membership.status):
        raise HTTPException(status_code=400, detail="Trainers can only be assigned to active memberships")
    trainer = get_active_trainer_or_404(db, payload.trainer_id)

    now = utcnow()
    spec = plan_spec_for(membership)
    membership_end = ensure_utc(membership.membership_end)
    if payload.duration_months:
        if membership_end is None:
            raise HTTPException(status_code=400, detail="Membership end date is missing")
        period_start = now
        period_end = trainer_renewal_end(now, payload.duration_months, membership_end)
        assignment_type = AssignmentType.addon
    else:
        period = compute_trainer_period(ensure_utc(membership.membership_start) or now, spec)
        if not (period.is_included or period.is_addon):
            raise HTTPException(status_code=400, detail="Plan does not include trainer access")
        period_start = period.period_start
        period_end = period.period_end
        assignment_type = AssignmentType(period.assignment_type)

    if period_end <= now:
        raise HTTPException(status_code=400, detail="Trainer period would already be expired")

    assignment = assign_trainer_period(
        db,
        membership,
        trainer,
        period_start,
        period_end,
        assignment_type,
        is_requested_by_user(spec),
        admin,
        now,
    )
    db.add(
        AuditLog(
            admin_id=admin.id,
            membership_id=membership.id,
            action="trainer_assigned",
            meta={"trainer_id": trainer.id, "period_end": period_end.isoformat()},
        )
    )
    db.commit()
    db.refresh(assignment)
    return serialize_assignment(assignment)


def get_pending_renewal_or_404(db: Session, membership_id: int) -> TrainerAssignment:
    assignment = (
        db.query(TrainerAssignment)
        .filter(
            TrainerAssignment.membership_id == membership_id,
            TrainerAssignment.assignment_type == AssignmentType.renewal,
            TrainerAssignment.status == AssignmentStatus.pending,
        )
        .order_by(TrainerAssignment.created_at.desc(), TrainerAssignment.id.desc())
        .first()
    )
    if not assignment:
        raise HTTPException(status_code=404, detail="No pending trainer renewal request")
    return assignment


@router.post("/memberships/{membership_id}/approve-trainer-renewal", response_model=TrainerAssignmentResponse)
def approve_trainer_renewal(
    membership_id: int,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> TrainerAssignmentResponse:
    membership = get_membership_or_404(db, membership_id)
    renewal = get_pending_renewal_or_404(db, membership.id)
    if not has_active_access(membership.status):
        raise HTTPException(status_code=400, detail="Trainer renewal requires an active membership")

    now = utcnow()
    (
        db.query(TrainerAssignment)
        .filter(
            TrainerAssignment.membership_id == membership.id,
            TrainerAssignment.status == AssignmentStatus.assigned,
        )
        .update({TrainerAssignment.status: AssignmentStatus.expired}, synchronize_session=False)
    )
    renewal.status = AssignmentStatus.assigned
    renewal.assigned_by = admin.id
    renewal.assigned_at = now

    membership.trainer_assigned = True
    membership.trainer_id = renewal.trainer_id
    membership.trainer_period_end = renewal.period_end
    membership.trainer_grace_period_end = None

    db.add(
        Notification(
            audience=NotificationAudience.member,
            recipient_id=membership.user_id,
            notification_type="trainer_renewal_approved",
            content="Your trainer renewal has been approved.",
            reference_id=str(membership.id),
        )
    )
    db.add(
        AuditLog(
            admin_id=admin.id,
            membership_id=membership.id,
            action="trainer_renewal_approved",
            meta={"assignment_id": renewal.id},
        )
    )
    db.commit()
    db.refresh(renewal)
    return serialize_assignment(renewal)


@router.post("/memberships/{membership_id}/reject-trainer-renewal", response_model=TrainerAssignmentResponse)
def reject_trainer_renewal(
    membership_id: int,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> TrainerAssignmentResponse:
    membership = get_membership_or_404(db, membership_id)
    renewal = get_pending_renewal_or_404(db, membership.id)
    renewal.status = AssignmentStatus.rejected

    db.add(
        Notification(
            audience=NotificationAudience.member,
            recipient_id=membership.user_id,
            notification_type="trainer_renewal_rejected",
            content="Your trainer renewal request was rejected.",
            reference_id=str(membership.id),
        )
    )
    db.add(
        AuditLog(
            admin_id=admin.id,
            membership_id=membership.id,
            action="trainer_renewal_rejected",
            meta={"assignment_id": renewal.id},
        )
    )
    db.commit()
    db.refresh(renewal)
    return serialize_assignment(renewal)


@router.post("/check-expiries", response_model=ExpirySweepResponse)
def check_expiries(
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ExpirySweepResponse:
    settings = get_settings()
    now = utcnow()
    result = run_expiry_sweep(
        db,
        now,
        membership_grace_days=settings.membership_grace_days,
        trainer_grace_days=settings.trainer_grace_days,
        notification_days=settings.expiry_notification_days,
    )
    return ExpirySweepResponse(**result.as_dict(), server_time=now)
