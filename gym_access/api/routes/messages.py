from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gym_access.api.deps import get_db, require_member
from gym_access.models import Membership, MembershipStatus
from gym_access.schemas import TrainerAccessResponse
from gym_access.services.auth import TokenData
from gym_access.services.eligibility import check_trainer_messaging_access_for_membership
from gym_access.services.membership_access import membership_snapshot
from gym_access.utils.time import utcnow

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/trainer/{trainer_id}/access", response_model=TrainerAccessResponse)
def trainer_messaging_access(
    trainer_id: str,
    token: TokenData = Depends(require_member),
    db: Session = Depends(get_db),
) -> TrainerAccessResponse:
    membership = (
        db.query(Membership)
        .filter(
            Membership.user_id == token.subject,
            Membership.status.in_([MembershipStatus.active, MembershipStatus.grace_period]),
        )
        .order_by(Membership.created_at.desc(), Membership.id.desc())
        .first()
    )
    now = utcnow()
    snapshot = membership_snapshot(membership) if membership else None
    verdict = check_trainer_messaging_access_for_membership(snapshot, trainer_id, now)

    return TrainerAccessResponse(
        trainer_id=trainer_id,
        can_message=verdict.can_message,
        is_active=verdict.is_active,
        is_expired=verdict.is_expired,
        is_in_grace_period=verdict.is_in_grace_period,
        reason=verdict.reason,
        grace_period_days_remaining=verdict.grace_period_days_remaining,
        server_time=now,
    )
