import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from submission_portal.core.deps import get_db
from submission_portal.core.permissions import require_admin
from submission_portal.core.security import hash_password
from submission_portal.models.assignment import Assignment
from submission_portal.models.submission import Submission, SubmissionStatus
from submission_portal.models.user import User
from submission_portal.schemas.admin import AdminStats
from submission_portal.schemas.submission import SubmissionRead
from submission_portal.schemas.user import AdminUserCreate, UserRead, UserToggleResult

logger = logging.getLogger(__name__)

# every admin route requires the admin role
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=AdminStats)
def dashboard_stats(db: Session = Depends(get_db)):
    def count_users(role: str) -> int:
        return (
            db.query(func.count(User.id))
            .filter(User.role == role, User.is_active.is_(True))
            .scalar()
        ) or 0

    total_assignments = (
        db.query(func.count(Assignment.id)).filter(Assignment.is_active.is_(True)).scalar()
    ) or 0
    total_submissions = db.query(func.count(Submission.id)).scalar() or 0
    graded = (
        db.query(func.count(Submission.id))
        .filter(Submission.status == SubmissionStatus.GRADED.value)
        .scalar()
    ) or 0
    late = (
        db.query(func.count(Submission.id))
        .filter(Submission.status == SubmissionStatus.LATE.value)
        .scalar()
    ) or 0
    avg = (
        db.query(func.avg(Submission.marks))
        .filter(
            Submission.status == SubmissionStatus.GRADED.value,
            Submission.marks.is_not(None),
        )
        .scalar()
    )

    recent_submissions = (
        db.query(Submission).order_by(Submission.submitted_at.desc(), Submission.id.desc()).limit(5).all()
    )
    recent_assignments = (
        db.query(Assignment)
        .filter(Assignment.is_active.is_(True))
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .limit(5)
        .all()
    )

    return {
        "overview": {
            "total_students": count_users("student"),
            "total_teachers": count_users("teacher"),
            "total_assignments": int(total_assignments),
            "total_submissions": int(total_submissions),
            "graded_submissions": int(graded),
            "late_submissions": int(late),
            "average_marks": round(float(avg), 1) if avg is not None else None,
            "pending_grading": int(total_submissions - graded),
        },
        "recent_submissions": recent_submissions,
        "recent_assignments": recent_assignments,
    }


@router.get("/users", response_model=list[UserRead])
def list_users(
    role: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(payload: AdminUserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="Email already exists")

    user = User(
        email=payload.email,
        full_name=payload.full_name,
        role=payload.role,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info("admin created user %s as %s", user.id, user.role)
    return user


@router.put("/users/{user_id}/toggle", response_model=UserToggleResult)
def toggle_user(user_id: int, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.is_active = not user.is_active

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    return {
        "message": f"User {'activated' if user.is_active else 'deactivated'}",
        "is_active": user.is_active,
    }


@router.get("/submissions", response_model=list[SubmissionRead])
def all_submissions(db: Session = Depends(get_db)):
    return db.query(Submission).order_by(Submission.submitted_at.desc(), Submission.id.desc()).all()
