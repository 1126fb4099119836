# import models so Base.metadata sees every table
from submission_portal.db.base_class import Base  # noqa: F401
from submission_portal.models.assignment import Assignment, AssignmentAttachment  # noqa: F401
from submission_portal.models.submission import Submission, SubmissionFile  # noqa: F401
from submission_portal.models.user import User  # noqa: F401
