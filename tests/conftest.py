import os
import shutil
import tempfile
from datetime import datetime, timedelta, timezone

TEST_DB_FILE = "test_submission_portal.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"
TEST_UPLOAD_DIR = tempfile.mkdtemp(prefix="portal-uploads-")

# must be set before the app modules read their config
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["UPLOAD_DIR"] = TEST_UPLOAD_DIR

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from submission_portal.core.deps import get_db  # noqa: E402
from submission_portal.core.security import hash_password  # noqa: E402
from submission_portal.db.base import Base  # noqa: E402
from submission_portal.main import app  # noqa: E402
from submission_portal.models.assignment import Assignment, AssignmentAttachment  # noqa: E402
from submission_portal.models.submission import Submission, SubmissionFile  # noqa: E402
from submission_portal.models.user import User  # noqa: E402

from tests.helpers import PASSWORD  # noqa: E402
# bcrypt is slow on purpose; hash once for every seeded user
PASSWORD_HASH = hash_password(PASSWORD)

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False, "timeout": 15},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)
    shutil.rmtree(TEST_UPLOAD_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def seed():
    """Seed a clean minimal dataset for each test; returns the ids."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(SubmissionFile).delete()
        db.query(Submission).delete()
        db.query(AssignmentAttachment).delete()
        db.query(Assignment).delete()
        db.query(User).delete()
        db.commit()

        def user(email, name, role):
            return User(email=email, full_name=name, role=role, hashed_password=PASSWORD_HASH)

        admin = user("admin@example.com", "Admin User", "admin")
        teacher = user("teacher1@example.com", "Teacher One", "teacher")
        other_teacher = user("teacher2@example.com", "Teacher Two", "teacher")
        student = user("student1@example.com", "Student One", "student")
        other_student = user("student2@example.com", "Student Two", "student")
        db.add_all([admin, teacher, other_teacher, student, other_student])
        db.commit()

        now = datetime.now(timezone.utc)
        hw1 = Assignment(
            teacher_id=teacher.id,
            title="Binary Search Trees",
            description="Implement insert, delete and search.",
            subject="Computer Science",
            deadline=now + timedelta(days=7),
            max_marks=100,
        )
        essay = Assignment(
            teacher_id=teacher.id,
            title="Climate Essay",
            description="1500 words on climate solutions.",
            subject="Environmental Science",
            deadline=now - timedelta(days=2),
            max_marks=75,
        )
        calculus = Assignment(
            teacher_id=other_teacher.id,
            title="Calculus Problem Set 3",
            description="Solve all 20 problems.",
            subject="Mathematics",
            deadline=now + timedelta(days=3),
            max_marks=50,
        )
        archived = Assignment(
            teacher_id=teacher.id,
            title="Old Lab",
            description="No longer open.",
            subject="Computer Science",
            deadline=now + timedelta(days=1),
            max_marks=10,
            is_active=False,
        )
        db.add_all([hw1, essay, calculus, archived])
        db.commit()

        yield {
            "admin": admin.id,
            "teacher": teacher.id,
            "other_teacher": other_teacher.id,
            "student": student.id,
            "other_student": other_student.id,
            "hw1": hw1.id,
            "essay": essay.id,
            "calculus": calculus.id,
            "archived": archived.id,
        }
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def session_factory():
    return TestingSessionLocal
