"""Populate the configured database with demo data.

Run with ``python -m submission_portal.db.seed``. Existing rows are removed
first. Every demo account uses the password ``demo123``.
"""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from submission_portal.core.config import UPLOAD_DIR
from submission_portal.core.security import hash_password
from submission_portal.db.init_db import init_db
from submission_portal.db.session import SessionLocal
from submission_portal.models.assignment import Assignment, AssignmentAttachment
from submission_portal.models.submission import Submission, SubmissionFile, SubmissionStatus
from submission_portal.models.user import User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo123"


def clear(db: Session) -> None:
    # child -> parent
    db.query(SubmissionFile).delete()
    db.query(Submission).delete()
    db.query(AssignmentAttachment).delete()
    db.query(Assignment).delete()
    db.query(User).delete()
    db.commit()


def _file(name: str, original_name: str, size: int, media_type: str) -> SubmissionFile:
    return SubmissionFile(
        position=0,
        stored_name=name,
        original_name=original_name,
        path=str(UPLOAD_DIR / "submissions" / name),
        size=size,
        media_type=media_type,
    )


def seed_demo(db: Session, now: datetime | None = None) -> dict:
    """Insert demo users, assignments and submissions; returns the new ids."""
    now = now or datetime.now(timezone.utc)
    hashed = hash_password(DEMO_PASSWORD)

    def user(email, name, role):
        return User(email=email, full_name=name, role=role, hashed_password=hashed)

    admin = user("admin@demo.com", "Admin User", "admin")
    teacher = user("teacher@demo.com", "Prof. Sarah Johnson", "teacher")
    teacher2 = user("teacher2@demo.com", "Dr. Michael Chen", "teacher")
    student = user("student@demo.com", "Alice Smith", "student")
    student2 = user("student2@demo.com", "Bob Williams", "student")
    db.add_all([admin, teacher, teacher2, student, student2])
    db.commit()
    logger.info("created demo users")

    bst = Assignment(
        teacher_id=teacher.id,
        title="Introduction to Data Structures",
        description="Implement a Binary Search Tree with insert, delete, and search operations.",
        subject="Computer Science",
        deadline=now + timedelta(days=7),
        max_marks=100,
    )
    calculus = Assignment(
        teacher_id=teacher2.id,
        title="Calculus Problem Set 3",
        description="Solve all 20 problems in the attached PDF. Show all work.",
        subject="Mathematics",
        deadline=now + timedelta(days=3),
        max_marks=50,
    )
    essay = Assignment(
        teacher_id=teacher.id,
        title="Essay: Climate Change Solutions",
        description="Write a 1500-word essay discussing innovative climate solutions.",
        subject="Environmental Science",
        deadline=now - timedelta(days=2),
        max_marks=75,
    )
    database = Assignment(
        teacher_id=teacher2.id,
        title="Database Design Project",
        description="Design a normalized relational database for a library system.",
        subject="Database Systems",
        deadline=now + timedelta(days=14),
        max_marks=100,
    )
    db.add_all([bst, calculus, essay, database])
    db.commit()
    logger.info("created demo assignments")

    graded = Submission(
        assignment_id=calculus.id,
        student_id=student.id,
        comments="Problems 15-18 were challenging.",
        status=SubmissionStatus.GRADED.value,
        submitted_at=now - timedelta(days=2),
        marks=43,
        feedback="Great work!",
        graded_by_id=teacher2.id,
        graded_at=now - timedelta(days=1),
    )
    graded.files = [
        _file("calculus_ps3.pdf", "Calculus Problem Set 3 - Alice Smith.pdf", 245760, "application/pdf"),
    ]

    # handed in on the deadline day, before the cut-off
    on_time = Submission(
        assignment_id=essay.id,
        student_id=student.id,
        comments="Submitted on the deadline day.",
        status=SubmissionStatus.SUBMITTED.value,
        submitted_at=essay.deadline - timedelta(hours=3),
        feedback="",
    )
    on_time.files = [
        _file(
            "climate_essay.docx",
            "Climate Change Essay - Alice Smith.docx",
            52480,
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ),
    ]

    pending = Submission(
        assignment_id=calculus.id,
        student_id=student2.id,
        comments="",
        status=SubmissionStatus.SUBMITTED.value,
        submitted_at=now - timedelta(hours=6),
        feedback="",
    )
    pending.files = [
        _file("bob_calculus.pdf", "Calculus PS3 - Bob Williams.pdf", 198400, "application/pdf"),
    ]

    db.add_all([graded, on_time, pending])
    db.commit()
    logger.info("created demo submissions")

    return {
        "admin": admin.id,
        "teacher": teacher.id,
        "teacher2": teacher2.id,
        "student": student.id,
        "student2": student2.id,
        "assignments": [bst.id, calculus.id, essay.id, database.id],
        "submissions": [graded.id, on_time.id, pending.id],
    }


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    init_db()

    db = SessionLocal()
    try:
        clear(db)
        seed_demo(db)
    except Exception:
        db.rollback()
        logger.exception("seed failed")
        raise
    finally:
        db.close()

    logger.info("seed completed; demo logins use password %r", DEMO_PASSWORD)
    for email in ("admin@demo.com", "teacher@demo.com", "student@demo.com"):
        logger.info("  %s", email)


if __name__ == "__main__":
    main()
