from datetime import datetime

from pydantic import BaseModel, Field


class MembershipRenewalResponse(BaseModel):
    is_eligible: bool
    reason: str | None = None
    grace_period_days_remaining: int | None = None


class TrainerRenewalResponse(BaseModel):
    is_eligible: bool
    reason: str | None = None
    is_in_grace_period: bool = False
    grace_period_days_remaining: int | None = None
    remaining_plan_days: int | None = None


class RenewalEligibilityResponse(BaseModel):
    membership_id: int
    status: str
    plan_type: str
    can_purchase_new_plan: bool
    can_submit_payment: bool
    membership_renewal: MembershipRenewalResponse
    trainer_renewal: TrainerRenewalResponse
    max_trainer_renewal_days: int | None = None
    badge: str | None = None
    server_time: datetime


class TrainerAccessResponse(BaseModel):
    trainer_id: str
    can_message: bool
    is_active: bool
    is_expired: bool
    is_in_grace_period: bool
    reason: str
    grace_period_days_remaining: int | None = None
    server_time: datetime


class TrainerRenewalRequest(BaseModel):
    duration_months: int = Field(default=1, ge=1, le=12)


class TrainerAssignmentResponse(BaseModel):
    id: int
    membership_id: int
    trainer_id: str
    assignment_type: str
    status: str
    period_start: datetime
    period_end: datetime
    requested_by_user: bool
