import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from submission_portal.db.base_class import Base


class SubmissionStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    LATE = "late"
    GRADED = "graded"
    RETURNED = "returned"


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)

    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    comments = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default=SubmissionStatus.SUBMITTED.value)

    # set once at intake, never touched again
    submitted_at = Column(DateTime(timezone=True), nullable=False)

    # Grading fields (nullable until graded)
    marks = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=False, default="")
    graded_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", back_populates="submissions", foreign_keys=[student_id])
    graded_by = relationship("User", foreign_keys=[graded_by_id])

    files = relationship(
        "SubmissionFile",
        back_populates="submission",
        order_by="SubmissionFile.position",
        cascade="all, delete-orphan",
    )


class SubmissionFile(Base):
    __tablename__ = "submission_files"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    stored_name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=False)
    size = Column(Integer, nullable=False)
    media_type = Column(String(255), nullable=False)

    submission = relationship("Submission", back_populates="files")
