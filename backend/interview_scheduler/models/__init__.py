from .availability import AvailabilityBlock
from .candidate import Candidate, CandidateStatus
from .interviewer import Interviewer
from .session import (
    ADMIN_ASSIGNABLE_STATUSES,
    OPEN_STATUSES,
    InterviewResult,
    InterviewSession,
    SessionStatus,
    can_transition,
)
from .user import HR_ROLES, INTERVIEWER_ROLES, User, UserRole, UserStatus

__all__ = [
    "ADMIN_ASSIGNABLE_STATUSES",
    "AvailabilityBlock",
    "Candidate",
    "CandidateStatus",
    "HR_ROLES",
    "INTERVIEWER_ROLES",
    "InterviewResult",
    "InterviewSession",
    "Interviewer",
    "OPEN_STATUSES",
    "SessionStatus",
    "User",
    "UserRole",
    "UserStatus",
    "can_transition",
]
