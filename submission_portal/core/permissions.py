from fastapi import Depends, HTTPException, status

from submission_portal.core.current_user import get_current_user
from submission_portal.core.errors import Forbidden
from submission_portal.models.assignment import Assignment
from submission_portal.models.submission import Submission
from submission_portal.models.user import User


def require_roles(*roles: str):
    """Dependency factory: let the request through only for the given roles."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access restricted to: {', '.join(roles)}",
            )
        return current_user

    return dependency


require_student = require_roles("student")
require_teacher = require_roles("teacher", "admin")
require_admin = require_roles("admin")


def can_manage_assignment(actor: User, assignment: Assignment) -> bool:
    if actor.role == "admin":
        return True
    return actor.role == "teacher" and assignment.teacher_id == actor.id


def can_view_submission(actor: User, submission: Submission) -> bool:
    if actor.role == "student":
        return submission.student_id == actor.id
    return can_manage_assignment(actor, submission.assignment)


def ensure_can_manage_assignment(actor: User, assignment: Assignment, action: str = "manage") -> None:
    if not can_manage_assignment(actor, assignment):
        raise Forbidden(f"Not authorized to {action} this assignment")
