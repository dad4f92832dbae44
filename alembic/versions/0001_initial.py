"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

MEMBERSHIP_STATUSES = (
    "awaiting_payment",
    "pending",
    "active",
    "grace_period",
    "expired",
    "rejected",
    "cancelled",
)


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=True)

    op.create_table(
        "trainers",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True, unique=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "memberships",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("plan_name", sa.String(length=64), nullable=False),
        sa.Column("plan_mode", sa.Enum("online", "in_gym", name="planmode"), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("has_trainer_addon", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("requested_trainer_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.Enum(*MEMBERSHIP_STATUSES, name="membershipstatus"), nullable=False),
        sa.Column("membership_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("membership_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("grace_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trainer_assigned", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("trainer_id", sa.String(length=64), nullable=True),
        sa.Column("trainer_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trainer_grace_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["requested_trainer_id"], ["trainers.id"], name="fk_memberships_requested_trainer_id_trainers"
        ),
        sa.ForeignKeyConstraint(["trainer_id"], ["trainers.id"], name="fk_memberships_trainer_id_trainers"),
        sa.CheckConstraint(
            "grace_period_end IS NULL OR membership_end IS NULL OR grace_period_end >= membership_end",
            name="ck_memberships_grace_after_end",
        ),
    )
    op.create_index(op.f("ix_memberships_user_id"), "memberships", ["user_id"], unique=False)
    op.create_index(op.f("ix_memberships_status"), "memberships", ["status"], unique=False)
    op.create_index(op.f("ix_memberships_trainer_id"), "memberships", ["trainer_id"], unique=False)

    op.create_table(
        "trainer_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("membership_id", sa.Integer(), nullable=False),
        sa.Column("trainer_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "assignment_type",
            sa.Enum("included", "addon", "renewal", name="assignmenttype"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("pending", "assigned", "rejected", "expired", name="assignmentstatus"),
            nullable=False,
        ),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=True),
        sa.Column("requested_by_user", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("assigned_by", sa.Integer(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["membership_id"], ["memberships.id"], name="fk_trainer_assignments_membership_id_memberships"
        ),
        sa.ForeignKeyConstraint(["trainer_id"], ["trainers.id"], name="fk_trainer_assignments_trainer_id_trainers"),
    )
    op.create_index(
        op.f("ix_trainer_assignments_membership_id"), "trainer_assignments", ["membership_id"], unique=False
    )
    op.create_index(op.f("ix_trainer_assignments_trainer_id"), "trainer_assignments", ["trainer_id"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "audience",
            sa.Enum("member", "trainer", "admin", name="notificationaudience"),
            nullable=False,
        ),
        sa.Column("recipient_id", sa.String(length=64), nullable=True),
        sa.Column("notification_type", sa.String(length=64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("reference_id", sa.String(length=64), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(op.f("ix_notifications_recipient_id"), "notifications", ["recipient_id"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("admin_id", sa.Integer(), nullable=True),
        sa.Column("membership_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["admin_id"], ["admins.id"], name="fk_audit_logs_admin_id_admins"),
        sa.ForeignKeyConstraint(["membership_id"], ["memberships.id"], name="fk_audit_logs_membership_id_memberships"),
    )
    op.create_index(op.f("ix_audit_logs_admin_id"), "audit_logs", ["admin_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_audit_logs_admin_id"), table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index(op.f("ix_notifications_recipient_id"), table_name="notifications")
    op.drop_table("notifications")

    op.drop_index(op.f("ix_trainer_assignments_trainer_id"), table_name="trainer_assignments")
    op.drop_index(op.f("ix_trainer_assignments_membership_id"), table_name="trainer_assignments")
    op.drop_table("trainer_assignments")

    op.drop_index(op.f("ix_memberships_trainer_id"), table_name="memberships")
    op.drop_index(op.f("ix_memberships_status"), table_name="memberships")
    op.drop_index(op.f("ix_memberships_user_id"), table_name="memberships")
    op.drop_table("memberships")

    op.drop_table("trainers")

    op.drop_index(op.f("ix_admins_email"), table_name="admins")
    op.drop_table("admins")

    op.execute("DROP TYPE IF EXISTS assignmentstatus")
    op.execute("DROP TYPE IF EXISTS assignmenttype")
    op.execute("DROP TYPE IF EXISTS membershipstatus")
    op.execute("DROP TYPE IF EXISTS planmode")
    op.execute("DROP TYPE IF EXISTS notificationaudience")
