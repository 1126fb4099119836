"""Submission lifecycle: intake, grading and return-for-revision.

Every function takes the session it works on; callers own its lifecycle.
Failures are raised as ``PortalError`` subclasses and never leave a partial
write behind.
"""
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from submission_portal.core.errors import Conflict, Forbidden, InvalidInput, NotFound
from submission_portal.core.permissions import can_view_submission, ensure_can_manage_assignment
from submission_portal.models.assignment import Assignment
from submission_portal.models.submission import Submission, SubmissionFile, SubmissionStatus
from submission_portal.models.user import User
from submission_portal.services.lateness import is_late
from submission_portal.services.storage import StoredFile

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024


@dataclass
class IntakeResult:
    submission: Submission
    is_late: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_active_assignment(db: Session, assignment_id: int) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a or not a.is_active:
        raise NotFound("Assignment not found")
    return a


def _get_submission(db: Session, submission_id: int) -> Submission:
    sub = db.query(Submission).filter(Submission.id == submission_id).first()
    if not sub:
        raise NotFound("Submission not found")
    return sub


def _check_upload_policy(assignment: Assignment, files: Sequence[StoredFile]) -> None:
    allowed = {t.lower().lstrip(".") for t in (assignment.allowed_file_types or [])}
    limit = assignment.max_file_size_mb * MEGABYTE

    for f in files:
        ext = os.path.splitext(f.original_name)[1].lower().lstrip(".")
        if allowed and ext not in allowed:
            raise InvalidInput(f"File type not allowed for this assignment: {f.original_name}")
        if f.size > limit:
            raise InvalidInput(f"File too large for this assignment: {f.original_name}")


def find_existing(db: Session, assignment_id: int, student_id: int) -> Submission | None:
    return (
        db.query(Submission)
        .filter(
            and_(
                Submission.assignment_id == assignment_id,
                Submission.student_id == student_id,
            )
        )
        .first()
    )


def submit_assignment(
    db: Session,
    assignment_id: int,
    student: User,
    files: Sequence[StoredFile],
    comments: str | None = None,
    now: datetime | None = None,
) -> IntakeResult:
    assignment = _get_active_assignment(db, assignment_id)

    # gives the documented error order; the unique index is what actually
    # guards concurrent requests
    if find_existing(db, assignment_id, student.id) is not None:
        raise Conflict("You have already submitted this assignment")

    if not files:
        raise InvalidInput("At least one file is required")

    _check_upload_policy(assignment, files)

    now = now or _utcnow()
    late = is_late(now, assignment.deadline)

    s = Submission(
        assignment_id=assignment_id,
        student_id=student.id,
        comments=comments or "",
        status=(SubmissionStatus.LATE if late else SubmissionStatus.SUBMITTED).value,
        submitted_at=now,
        feedback="",
    )
    s.files = [
        SubmissionFile(
            position=i,
            stored_name=f.stored_name,
            original_name=f.original_name,
            path=f.path,
            size=f.size,
            media_type=f.media_type,
        )
        for i, f in enumerate(files)
    ]
    db.add(s)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            "duplicate submission rejected (assignment=%s, student=%s)",
            assignment_id,
            student.id,
        )
        raise Conflict("You have already submitted this assignment")
    except Exception:
        db.rollback()
        raise

    db.refresh(s)
    logger.info(
        "submission %s created (assignment=%s, student=%s, status=%s)",
        s.id,
        assignment_id,
        student.id,
        s.status,
    )
    return IntakeResult(submission=s, is_late=late)


def grade_submission(
    db: Session,
    submission_id: int,
    grader: User,
    marks: int,
    feedback: str | None = None,
    now: datetime | None = None,
) -> Submission:
    sub = _get_submission(db, submission_id)

    # bound is read from the assignment every time, never cached
    assignment = sub.assignment
    ensure_can_manage_assignment(grader, assignment, action="grade")

    if marks < 0 or marks > assignment.max_marks:
        raise InvalidInput(f"Marks must be between 0 and {assignment.max_marks}")

    sub.marks = marks
    sub.feedback = feedback or ""
    sub.status = SubmissionStatus.GRADED.value
    sub.graded_by_id = grader.id
    sub.graded_at = now or _utcnow()

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sub)
    logger.info("submission %s graded %s/%s by user %s", sub.id, marks, assignment.max_marks, grader.id)
    return sub


def return_submission(
    db: Session,
    submission_id: int,
    actor: User,
    feedback: str | None = None,
) -> Submission:
    sub = _get_submission(db, submission_id)
    ensure_can_manage_assignment(actor, sub.assignment, action="return")

    # marks / graded_by / graded_at are kept
    sub.status = SubmissionStatus.RETURNED.value
    sub.feedback = feedback or ""

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(sub)
    logger.info("submission %s returned by user %s", sub.id, actor.id)
    return sub


def get_submission(db: Session, submission_id: int, actor: User) -> Submission:
    sub = _get_submission(db, submission_id)
    if not can_view_submission(actor, sub):
        raise Forbidden("Not authorized")
    return sub


def list_my_submissions(db: Session, student: User) -> list[Submission]:
    return (
        db.query(Submission)
        .filter(Submission.student_id == student.id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )


def list_assignment_submissions(db: Session, assignment_id: int, actor: User) -> tuple[Assignment, list[Submission]]:
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        raise NotFound("Assignment not found")
    ensure_can_manage_assignment(actor, assignment, action="view submissions of")

    subs = (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )
    return assignment, subs


def get_submission_file(db: Session, submission_id: int, position: int, actor: User) -> SubmissionFile:
    sub = get_submission(db, submission_id, actor)

    match = next((f for f in sub.files if f.position == position), None)
    if match is None or not os.path.exists(match.path):
        raise NotFound("File not found")
    return match
