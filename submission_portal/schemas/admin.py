from typing import Optional

from pydantic import BaseModel

from submission_portal.schemas.assignment import AssignmentRead
from submission_portal.schemas.submission import SubmissionRead


class StatsOverview(BaseModel):
    total_students: int
    total_teachers: int
    total_assignments: int
    total_submissions: int
    graded_submissions: int
    late_submissions: int
    average_marks: Optional[float] = None
    pending_grading: int


class AdminStats(BaseModel):
    overview: StatsOverview
    recent_submissions: list[SubmissionRead]
    recent_assignments: list[AssignmentRead]
