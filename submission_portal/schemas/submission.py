from typing import Optional

from pydantic import BaseModel, Field

from submission_portal.schemas.common import UTCDatetime
from submission_portal.schemas.user import UserBrief


class SubmissionFileRead(BaseModel):
    position: int
    stored_name: str
    original_name: str
    size: int
    media_type: str

    class Config:
        from_attributes = True


class AssignmentBrief(BaseModel):
    id: int
    title: str
    subject: str
    deadline: UTCDatetime
    max_marks: int

    class Config:
        from_attributes = True


class SubmissionRead(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    files: list[SubmissionFileRead]
    comments: str
    status: str
    submitted_at: UTCDatetime

    # grading fields (absent until graded)
    marks: Optional[int] = None
    feedback: str = ""
    graded_by_id: Optional[int] = None
    graded_at: Optional[UTCDatetime] = None

    assignment: Optional[AssignmentBrief] = None
    student: Optional[UserBrief] = None

    class Config:
        from_attributes = True


class SubmissionCreated(BaseModel):
    submission: SubmissionRead
    is_late: bool


class SubmissionGradeUpdate(BaseModel):
    marks: int
    feedback: Optional[str] = None


class SubmissionReturn(BaseModel):
    feedback: Optional[str] = Field(default=None)


class AssignmentSubmissions(BaseModel):
    submissions: list[SubmissionRead]
    max_marks: int
