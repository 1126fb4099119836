from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from submission_portal.core.current_user import get_current_user
from submission_portal.core.deps import get_db
from submission_portal.core.permissions import require_student, require_teacher
from submission_portal.models.user import User
from submission_portal.schemas.submission import (
    SubmissionCreated,
    SubmissionGradeUpdate,
    SubmissionRead,
    SubmissionReturn,
)
from submission_portal.services import storage
from submission_portal.services import submissions as lifecycle

router = APIRouter()


@router.post(
    "",
    response_model=SubmissionCreated,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: int = Form(...),
    comments: str = Form(""),
    files: list[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    stored = storage.save_uploads(files)

    try:
        result = lifecycle.submit_assignment(
            db,
            assignment_id=assignment_id,
            student=me,
            files=stored,
            comments=comments,
        )
    except Exception:
        # nothing was recorded, so the blobs have no owner
        storage.discard(stored)
        raise

    return {"submission": result.submission, "is_late": result.is_late}


@router.get("/my", response_model=list[SubmissionRead])
def my_submissions(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return lifecycle.list_my_submissions(db, me)


@router.get("/{submission_id}", response_model=SubmissionRead)
def get_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lifecycle.get_submission(db, submission_id, current_user)


@router.get("/{submission_id}/files/{position}", response_class=FileResponse)
def download_submission_file(
    submission_id: int,
    position: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    f = lifecycle.get_submission_file(db, submission_id, position, current_user)
    return FileResponse(f.path, media_type=f.media_type, filename=f.original_name)


@router.put("/{submission_id}/grade", response_model=SubmissionRead)
def grade_submission(
    submission_id: int,
    payload: SubmissionGradeUpdate,
    db: Session = Depends(get_db),
    grader: User = Depends(require_teacher),
):
    return lifecycle.grade_submission(
        db,
        submission_id,
        grader=grader,
        marks=payload.marks,
        feedback=payload.feedback,
    )


@router.put("/{submission_id}/return", response_model=SubmissionRead)
def return_submission(
    submission_id: int,
    payload: SubmissionReturn,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    return lifecycle.return_submission(db, submission_id, actor=teacher, feedback=payload.feedback)
