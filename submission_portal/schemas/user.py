from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from submission_portal.schemas.common import UTCDatetime


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    full_name: str = Field(min_length=1, max_length=255)
    role: Literal["student", "teacher"] = "student"


class AdminUserCreate(UserCreate):
    role: Literal["student", "teacher", "admin"] = "student"


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    password: Optional[str] = Field(default=None, min_length=6, max_length=72)


class UserRead(BaseModel):
    id: int
    email: EmailStr
    full_name: str | None = None
    role: str
    is_active: bool
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class UserBrief(BaseModel):
    id: int
    email: str
    full_name: str | None = None

    class Config:
        from_attributes = True


class UserToggleResult(BaseModel):
    message: str
    is_active: bool
