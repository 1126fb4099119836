from typing import Optional

from pydantic import BaseModel, Field

from submission_portal.schemas.common import UTCDatetime
from submission_portal.schemas.user import UserBrief


class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    subject: str = Field(min_length=1, max_length=255)
    deadline: UTCDatetime
    max_marks: int = Field(ge=1)
    allowed_file_types: Optional[list[str]] = None
    max_file_size_mb: Optional[int] = Field(default=None, ge=1)


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    subject: Optional[str] = Field(default=None, min_length=1, max_length=255)
    deadline: Optional[UTCDatetime] = None
    max_marks: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class AttachmentRead(BaseModel):
    position: int
    stored_name: str
    original_name: str
    size: int
    media_type: str

    class Config:
        from_attributes = True


class AssignmentRead(BaseModel):
    id: int
    teacher_id: int
    title: str
    description: str
    subject: str
    deadline: UTCDatetime
    max_marks: int
    allowed_file_types: list[str]
    max_file_size_mb: int
    is_active: bool
    created_at: UTCDatetime
    teacher: Optional[UserBrief] = None
    attachments: list[AttachmentRead] = []

    class Config:
        from_attributes = True


class MySubmissionBrief(BaseModel):
    id: int
    status: str
    marks: Optional[int] = None

    class Config:
        from_attributes = True


class AssignmentWithMySubmission(AssignmentRead):
    my_submission: Optional[MySubmissionBrief] = None
