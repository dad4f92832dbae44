import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gym_access.db.base import Base


class AssignmentType(str, enum.Enum):
    included = "included"
    addon = "addon"
    renewal = "renewal"


class AssignmentStatus(str, enum.Enum):
    pending = "pending"
    assigned = "assigned"
    rejected = "rejected"
    expired = "expired"


class Trainer(Base):
    __tablename__ = "trainers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TrainerAssignment(Base):
    __tablename__ = "trainer_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    membership_id: Mapped[int] = mapped_column(ForeignKey("memberships.id"), nullable=False, index=True)
    trainer_id: Mapped[str] = mapped_column(String(64), ForeignKey("trainers.id"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assignment_type: Mapped[AssignmentType] = mapped_column(Enum(AssignmentType), nullable=False)
    status: Mapped[AssignmentStatus] = mapped_column(
        Enum(AssignmentStatus), nullable=False, default=AssignmentStatus.pending
    )
    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    requested_by_user: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    assigned_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    membership = relationship("Membership", back_populates="assignments")
    trainer = relationship("Trainer")
