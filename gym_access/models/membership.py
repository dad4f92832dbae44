import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gym_access.db.base import Base


class MembershipStatus(str, enum.Enum):
    awaiting_payment = "awaiting_payment"
    pending = "pending"
    active = "active"
    grace_period = "grace_period"
    expired = "expired"
    rejected = "rejected"
    cancelled = "cancelled"


class PlanMode(str, enum.Enum):
    online = "online"
    in_gym = "in_gym"


class Membership(Base):
    __tablename__ = "memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    plan_name: Mapped[str] = mapped_column(String(64), nullable=False)
    plan_mode: Mapped[PlanMode] = mapped_column(Enum(PlanMode), nullable=False, default=PlanMode.online)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    has_trainer_addon: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requested_trainer_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("trainers.id"), nullable=True)
    status: Mapped[MembershipStatus] = mapped_column(
        Enum(MembershipStatus), nullable=False, default=MembershipStatus.pending, index=True
    )
    membership_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    membership_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    grace_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    trainer_assigned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    trainer_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("trainers.id"), nullable=True, index=True)
    trainer_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    trainer_grace_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    trainer = relationship("Trainer", foreign_keys=[trainer_id])
    assignments = relationship(
        "TrainerAssignment", back_populates="membership", cascade="all, delete-orphan"
    )
