import logging
import os

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from submission_portal.core.config import (
    DEFAULT_ALLOWED_FILE_TYPES,
    DEFAULT_MAX_FILE_SIZE_MB,
    MAX_ATTACHMENTS_PER_ASSIGNMENT,
)
from submission_portal.core.current_user import get_current_user
from submission_portal.core.deps import get_db
from submission_portal.core.permissions import can_manage_assignment, require_teacher
from submission_portal.models.assignment import Assignment, AssignmentAttachment
from submission_portal.models.submission import Submission
from submission_portal.models.user import User
from submission_portal.schemas.assignment import (
    AssignmentCreate,
    AssignmentRead,
    AssignmentUpdate,
    AssignmentWithMySubmission,
    MySubmissionBrief,
)
from submission_portal.schemas.submission import AssignmentSubmissions
from submission_portal.services import storage
from submission_portal.services import submissions as lifecycle

logger = logging.getLogger(__name__)

router = APIRouter()


def _ensure_assignment_exists(db: Session, assignment_id: int, active_only: bool = True) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a or (active_only and not a.is_active):
        raise HTTPException(status_code=404, detail="Assignment not found")
    return a


def _ensure_can_edit(a: Assignment, user: User) -> None:
    if not can_manage_assignment(user, a):
        raise HTTPException(status_code=403, detail="Not authorized to edit this assignment")


@router.get("", response_model=list[AssignmentWithMySubmission])
def list_assignments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Assignment).filter(Assignment.is_active.is_(True))
    if current_user.role == "teacher":
        query = query.filter(Assignment.teacher_id == current_user.id)

    assignments = query.order_by(Assignment.deadline.asc(), Assignment.id.asc()).all()

    if current_user.role != "student":
        return assignments

    # attach the student's own submission (if any) to each row
    subs = (
        db.query(Submission)
        .filter(
            Submission.student_id == current_user.id,
            Submission.assignment_id.in_([a.id for a in assignments]),
        )
        .all()
    )
    by_assignment = {s.assignment_id: s for s in subs}

    result = []
    for a in assignments:
        row = AssignmentWithMySubmission.model_validate(a)
        mine = by_assignment.get(a.id)
        if mine is not None:
            row.my_submission = MySubmissionBrief.model_validate(mine)
        result.append(row)
    return result


@router.get("/{assignment_id}", response_model=AssignmentWithMySubmission)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    a = _ensure_assignment_exists(db, assignment_id)

    row = AssignmentWithMySubmission.model_validate(a)
    if current_user.role == "student":
        mine = lifecycle.find_existing(db, a.id, current_user.id)
        if mine is not None:
            row.my_submission = MySubmissionBrief.model_validate(mine)
    return row


@router.post(
    "",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    a = Assignment(
        teacher_id=teacher.id,
        title=payload.title,
        description=payload.description,
        subject=payload.subject,
        deadline=payload.deadline,
        max_marks=payload.max_marks,
        allowed_file_types=payload.allowed_file_types or list(DEFAULT_ALLOWED_FILE_TYPES),
        max_file_size_mb=payload.max_file_size_mb or DEFAULT_MAX_FILE_SIZE_MB,
    )
    db.add(a)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(a)
    logger.info("assignment %s created by user %s", a.id, teacher.id)
    return a


@router.put("/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    # inactive assignments can still be edited (e.g. re-activated)
    a = _ensure_assignment_exists(db, assignment_id, active_only=False)
    _ensure_can_edit(a, teacher)

    # existing submissions keep the lateness decided at intake
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(a, field, value)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(a)
    return a


@router.delete("/{assignment_id}")
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    a = _ensure_assignment_exists(db, assignment_id, active_only=False)
    _ensure_can_edit(a, teacher)

    # soft delete: submissions must never disappear with it
    a.is_active = False

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("assignment %s deactivated by user %s", a.id, teacher.id)
    return {"message": "Assignment deleted successfully"}


@router.get("/{assignment_id}/submissions", response_model=AssignmentSubmissions)
def list_submissions_for_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    assignment, subs = lifecycle.list_assignment_submissions(db, assignment_id, teacher)
    return {"submissions": subs, "max_marks": assignment.max_marks}


@router.post(
    "/{assignment_id}/attachments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
def add_attachments(
    assignment_id: int,
    attachments: list[UploadFile] = File(...),
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    a = _ensure_assignment_exists(db, assignment_id, active_only=False)
    _ensure_can_edit(a, teacher)

    existing = len(a.attachments)
    remaining = MAX_ATTACHMENTS_PER_ASSIGNMENT - existing
    if len(attachments) > remaining:
        raise HTTPException(
            status_code=400,
            detail=f"At most {MAX_ATTACHMENTS_PER_ASSIGNMENT} attachments are allowed",
        )

    stored = storage.save_uploads(
        attachments,
        folder="assignments",
        max_files=MAX_ATTACHMENTS_PER_ASSIGNMENT,
        field="attachments",
    )
    for i, f in enumerate(stored, start=existing):
        a.attachments.append(
            AssignmentAttachment(
                position=i,
                stored_name=f.stored_name,
                original_name=f.original_name,
                path=f.path,
                size=f.size,
                media_type=f.media_type,
            )
        )

    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.discard(stored)
        raise

    db.refresh(a)
    logger.info("assignment %s: %s attachment(s) added by user %s", a.id, len(stored), teacher.id)
    return a


@router.get("/{assignment_id}/attachments/{position}", response_class=FileResponse)
def download_attachment(
    assignment_id: int,
    position: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # owners keep access after a soft delete; everyone else only sees active ones
    a = _ensure_assignment_exists(db, assignment_id, active_only=False)
    if not a.is_active and not can_manage_assignment(current_user, a):
        raise HTTPException(status_code=404, detail="Assignment not found")

    match = next((f for f in a.attachments if f.position == position), None)
    if match is None or not os.path.exists(match.path):
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(match.path, media_type=match.media_type, filename=match.original_name)
