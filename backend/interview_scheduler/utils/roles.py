from fastapi import Depends

from ..models.user import HR_ROLES, INTERVIEWER_ROLES, UserRole
from .dependencies import get_current_user
from .error_handlers import ForbiddenError


def _roles_required(allowed: frozenset, label: str):
    names = {r.value for r in allowed}

    def check_role(user=Depends(get_current_user)):
        if user.get("role") not in names:
            raise ForbiddenError(f"{label} access only", details={"role": user.get("role")})
        return user
    return check_role


hr_only = _roles_required(HR_ROLES, "HR")
interviewer_only = _roles_required(INTERVIEWER_ROLES, "Interviewer")
hr_or_interviewer = _roles_required(HR_ROLES | INTERVIEWER_ROLES, "HR or interviewer")


def is_admin(user: dict) -> bool:
    return user.get("role") == UserRole.ADMIN.value
