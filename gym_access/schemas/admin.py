from datetime import datetime

from pydantic import BaseModel, Field


class MembershipResponse(BaseModel):
    id: int
    user_id: str
    plan_name: str
    plan_mode: str
    duration_months: int
    has_trainer_addon: bool
    status: str
    can_submit_payment: bool = False
    membership_start: datetime | None
    membership_end: datetime | None
    grace_period_end: datetime | None
    trainer_assigned: bool
    trainer_id: str | None
    trainer_period_end: datetime | None
    trainer_grace_period_end: datetime | None
    trainer_access: str
    expiring_soon: bool = False
    badge: str | None = None


class MembershipRejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class AssignTrainerRequest(BaseModel):
    trainer_id: str = Field(..., min_length=1, max_length=64)
    duration_months: int | None = Field(default=None, ge=1, le=12)


class ExpirySweepResponse(BaseModel):
    expiring_memberships: int
    expiring_trainer_periods: int
    entered_grace_period: int
    grace_reminders: int
    expired_memberships: int
    trainer_grace_started: int
    expired_trainer_periods: int
    notifications_created: int
    server_time: datetime
