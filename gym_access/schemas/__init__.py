from gym_access.schemas.admin import (
    AssignTrainerRequest,
    ExpirySweepResponse,
    MembershipRejectRequest,
    MembershipResponse,
)
from gym_access.schemas.auth import AdminLoginRequest, TokenResponse
from gym_access.schemas.membership import (
    MembershipRenewalResponse,
    RenewalEligibilityResponse,
    TrainerAccessResponse,
    TrainerAssignmentResponse,
    TrainerRenewalRequest,
    TrainerRenewalResponse,
)

__all__ = [
    "AdminLoginRequest",
    "TokenResponse",
    "MembershipResponse",
    "MembershipRejectRequest",
    "AssignTrainerRequest",
    "ExpirySweepResponse",
    "MembershipRenewalResponse",
    "TrainerRenewalResponse",
    "RenewalEligibilityResponse",
    "TrainerAccessResponse",
    "TrainerRenewalRequest",
    "TrainerAssignmentResponse",
]
