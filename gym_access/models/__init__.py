from gym_access.models.admin import Admin
from gym_access.models.audit_log import AuditLog
from gym_access.models.membership import Membership, MembershipStatus, PlanMode
from gym_access.models.notification import Notification, NotificationAudience
from gym_access.models.trainer import AssignmentStatus, AssignmentType, Trainer, TrainerAssignment

__all__ = [
    "Admin",
    "AssignmentStatus",
    "AssignmentType",
    "AuditLog",
    "Membership",
    "MembershipStatus",
    "Notification",
    "NotificationAudience",
    "PlanMode",
    "Trainer",
    "TrainerAssignment",
]
