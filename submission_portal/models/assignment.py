from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from submission_portal.core.config import DEFAULT_ALLOWED_FILE_TYPES, DEFAULT_MAX_FILE_SIZE_MB
from submission_portal.db.base_class import Base


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    subject = Column(String(255), nullable=False)

    # stored as UTC; SQLite hands it back naive
    deadline = Column(DateTime(timezone=True), nullable=False)
    max_marks = Column(Integer, nullable=False)

    # per-assignment upload policy, enforced at intake on top of the global allowlist
    allowed_file_types = Column(JSON, nullable=False, default=lambda: list(DEFAULT_ALLOWED_FILE_TYPES))
    max_file_size_mb = Column(Integer, nullable=False, default=DEFAULT_MAX_FILE_SIZE_MB)

    # soft delete flag; inactive assignments are invisible to students
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    teacher = relationship("User", back_populates="assignments")

    submissions = relationship("Submission", back_populates="assignment")

    attachments = relationship(
        "AssignmentAttachment",
        back_populates="assignment",
        order_by="AssignmentAttachment.position",
        cascade="all, delete-orphan",
    )


class AssignmentAttachment(Base):
    __tablename__ = "assignment_attachments"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    stored_name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=False)
    size = Column(Integer, nullable=False)
    media_type = Column(String(255), nullable=False)

    assignment = relationship("Assignment", back_populates="attachments")
