import os
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from submission_portal.core.config import UPLOAD_DIR
from submission_portal.models.assignment import Assignment
from submission_portal.models.submission import Submission
from submission_portal.services import storage
from tests.helpers import auth_header, login, pdf


def submit(client, token: str, assignment_id: int, files=None, comments: str = ""):
    return client.post(
        "/submissions",
        headers=auth_header(token),
        data={"assignment_id": str(assignment_id), "comments": comments},
        files=files if files is not None else [pdf()],
    )


def test_end_to_end_submit_grade_return(client, seed):
    student = login(client, "student1@example.com")
    teacher = login(client, "teacher1@example.com")

    r = submit(client, student, seed["hw1"], comments="first draft")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["is_late"] is False
    sub = body["submission"]
    assert sub["status"] == "submitted"
    assert sub["marks"] is None
    assert sub["comments"] == "first draft"
    assert [f["original_name"] for f in sub["files"]] == ["answer.pdf"]

    r = client.put(
        f"/submissions/{sub['id']}/grade",
        headers=auth_header(teacher),
        json={"marks": 80, "feedback": "solid"},
    )
    assert r.status_code == 200, r.text
    graded = r.json()
    assert graded["status"] == "graded"
    assert graded["marks"] == 80
    assert graded["graded_by_id"] == seed["teacher"]
    assert graded["graded_at"] is not None

    r = client.put(
        f"/submissions/{sub['id']}/return",
        headers=auth_header(teacher),
        json={"feedback": "redo part 2"},
    )
    assert r.status_code == 200, r.text
    returned = r.json()
    assert returned["status"] == "returned"
    assert returned["marks"] == 80
    assert returned["feedback"] == "redo part 2"


def test_past_deadline_submission_is_late(client, seed):
    student = login(client, "student1@example.com")

    r = submit(client, student, seed["essay"])
    assert r.status_code == 201, r.text
    assert r.json()["is_late"] is True
    assert r.json()["submission"]["status"] == "late"


def test_late_after_deadline_moved_into_past(client, seed, session_factory):
    student = login(client, "student1@example.com")

    # force hw1 deadline to the past in the test DB
    db: Session = session_factory()
    try:
        a = db.query(Assignment).filter(Assignment.id == seed["hw1"]).first()
        a.deadline = datetime.now(timezone.utc) - timedelta(days=2)
        db.commit()
    finally:
        db.close()

    r = submit(client, student, seed["hw1"])
    assert r.status_code == 201, r.text
    assert r.json()["submission"]["status"] == "late"


def test_second_submission_is_conflict(client, seed):
    student = login(client, "student1@example.com")

    r1 = submit(client, student, seed["hw1"], comments="original")
    assert r1.status_code == 201, r1.text

    r2 = submit(client, student, seed["hw1"], comments="overwrite?")
    assert r2.status_code == 409, r2.text
    assert r2.json()["detail"] == "You have already submitted this assignment"

    r = client.get(f"/submissions/{r1.json()['submission']['id']}", headers=auth_header(student))
    assert r.json()["comments"] == "original"


def test_submission_without_files_is_rejected(client, seed, db):
    student = login(client, "student1@example.com")

    r = client.post(
        "/submissions",
        headers=auth_header(student),
        data={"assignment_id": str(seed["hw1"])},
    )
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "At least one file is required"
    assert db.query(Submission).count() == 0


def test_submission_to_inactive_assignment_is_not_found(client, seed, db):
    student = login(client, "student1@example.com")

    r = submit(client, student, seed["archived"])
    assert r.status_code == 404
    assert db.query(Submission).count() == 0


def test_disallowed_media_type_is_rejected(client, seed, db):
    student = login(client, "student1@example.com")

    r = submit(client, student, seed["hw1"], files=[("files", ("run.exe", b"MZ", "application/x-msdownload"))])
    assert r.status_code == 400
    assert "File type not allowed" in r.json()["detail"]
    assert db.query(Submission).count() == 0


def test_uploaded_files_are_stored_and_discarded_on_failure(client, seed, db):
    student = login(client, "student1@example.com")

    r = submit(client, student, seed["hw1"], files=[pdf("a.pdf"), pdf("b.pdf")])
    assert r.status_code == 201, r.text
    sub = db.query(Submission).one()
    paths = [f.path for f in sub.files]
    assert [f.position for f in sub.files] == [0, 1]
    assert all(os.path.exists(p) for p in paths)

    upload_dir = os.path.dirname(paths[0])
    before = set(os.listdir(upload_dir))

    r = submit(client, student, seed["hw1"], files=[pdf("c.pdf")])
    assert r.status_code == 409
    assert set(os.listdir(upload_dir)) == before


def test_only_students_can_submit(client, seed):
    teacher = login(client, "teacher1@example.com")
    r = submit(client, teacher, seed["hw1"])
    assert r.status_code == 403


def test_my_submissions_lists_only_mine(client, seed):
    student = login(client, "student1@example.com")
    other = login(client, "student2@example.com")

    assert submit(client, student, seed["hw1"]).status_code == 201
    assert submit(client, other, seed["hw1"]).status_code == 201

    r = client.get("/submissions/my", headers=auth_header(student))
    assert r.status_code == 200
    rows = r.json()
    assert len(rows) == 1
    assert rows[0]["student_id"] == seed["student"]
    assert rows[0]["assignment"]["title"] == "Binary Search Trees"


def test_students_cannot_read_each_others_submission(client, seed):
    student = login(client, "student1@example.com")
    other = login(client, "student2@example.com")

    sub_id = submit(client, student, seed["hw1"]).json()["submission"]["id"]

    r = client.get(f"/submissions/{sub_id}", headers=auth_header(other))
    assert r.status_code == 403

    r = client.get("/submissions/999999", headers=auth_header(student))
    assert r.status_code == 404


def test_grade_bounds_over_http(client, seed):
    student = login(client, "student1@example.com")
    teacher = login(client, "teacher1@example.com")
    sub_id = submit(client, student, seed["hw1"]).json()["submission"]["id"]

    for marks in (-1, 101):
        r = client.put(f"/submissions/{sub_id}/grade", headers=auth_header(teacher), json={"marks": marks})
        assert r.status_code == 400, r.text
        assert r.json()["detail"] == "Marks must be between 0 and 100"

    for marks in (0, 100):
        r = client.put(f"/submissions/{sub_id}/grade", headers=auth_header(teacher), json={"marks": marks})
        assert r.status_code == 200, r.text
        assert r.json()["marks"] == marks


def test_grading_permissions(client, seed):
    student = login(client, "student1@example.com")
    other_teacher = login(client, "teacher2@example.com")
    admin = login(client, "admin@example.com")
    sub_id = submit(client, student, seed["hw1"]).json()["submission"]["id"]

    r = client.put(f"/submissions/{sub_id}/grade", headers=auth_header(student), json={"marks": 100})
    assert r.status_code == 403

    r = client.put(f"/submissions/{sub_id}/grade", headers=auth_header(other_teacher), json={"marks": 100})
    assert r.status_code == 403

    r = client.put(f"/submissions/{sub_id}/grade", headers=auth_header(admin), json={"marks": 100})
    assert r.status_code == 200
    assert r.json()["graded_by_id"] == seed["admin"]


def test_grade_and_return_missing_submission(client):
    teacher = login(client, "teacher1@example.com")

    r = client.put("/submissions/999999/grade", headers=auth_header(teacher), json={"marks": 1})
    assert r.status_code == 404
    r = client.put("/submissions/999999/return", headers=auth_header(teacher), json={"feedback": "x"})
    assert r.status_code == 404


def test_requests_without_token_are_rejected(client, seed):
    r = client.get("/submissions/my")
    assert r.status_code == 401


def listing(folder: str) -> set:
    target = UPLOAD_DIR / folder
    return set(os.listdir(target)) if target.is_dir() else set()


def test_return_without_feedback_clears_it_and_keeps_marks(client, seed):
    student = login(client, "student1@example.com")
    teacher = login(client, "teacher1@example.com")
    sub_id = submit(client, student, seed["hw1"]).json()["submission"]["id"]

    r = client.put(f"/submissions/{sub_id}/grade", headers=auth_header(teacher), json={"marks": 90, "feedback": "good"})
    assert r.status_code == 200, r.text

    r = client.put(f"/submissions/{sub_id}/return", headers=auth_header(teacher), json={})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "returned"
    assert body["feedback"] == ""
    assert body["marks"] == 90
    assert body["graded_by_id"] == seed["teacher"]


def test_too_many_files_are_rejected(client, seed, db):
    student = login(client, "student1@example.com")
    before = listing("submissions")

    files = [pdf(f"part{i}.pdf") for i in range(6)]
    r = submit(client, student, seed["hw1"], files=files)
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "At most 5 files are allowed"
    assert db.query(Submission).count() == 0
    assert listing("submissions") == before


def test_five_files_are_accepted(client, seed):
    student = login(client, "student1@example.com")

    files = [pdf(f"part{i}.pdf") for i in range(5)]
    r = submit(client, student, seed["hw1"], files=files)
    assert r.status_code == 201, r.text
    assert len(r.json()["submission"]["files"]) == 5


def test_oversized_file_is_rejected_before_anything_is_written(client, seed, db, monkeypatch):
    monkeypatch.setattr(storage, "MAX_UPLOAD_BYTES", 4)
    student = login(client, "student1@example.com")
    before = listing("submissions")

    r = submit(client, student, seed["hw1"], files=[pdf("big.pdf", b"%PDF-1.4 far too long")])
    assert r.status_code == 400, r.text
    assert r.json()["detail"].startswith("File too large")
    assert db.query(Submission).count() == 0
    assert listing("submissions") == before


def test_assignment_file_types_are_enforced(client, seed, db):
    student = login(client, "student1@example.com")
    before = listing("submissions")

    # image/png passes the global allowlist but hw1 only takes documents
    r = submit(client, student, seed["hw1"], files=[("files", ("diagram.png", b"\x89PNG", "image/png"))])
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "File type not allowed for this assignment: diagram.png"
    assert db.query(Submission).count() == 0
    assert listing("submissions") == before


def test_assignment_size_limit_is_enforced(client, seed, db, monkeypatch):
    # shrink a megabyte so hw1 (10 MB) caps uploads at 80 bytes
    monkeypatch.setattr("submission_portal.services.submissions.MEGABYTE", 8)
    student = login(client, "student1@example.com")

    r = submit(client, student, seed["hw1"], files=[pdf("long.pdf", b"%PDF-1.4 " + b"x" * 100)])
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "File too large for this assignment: long.pdf"
    assert db.query(Submission).count() == 0


def test_download_submission_file(client, seed):
    student = login(client, "student1@example.com")
    teacher = login(client, "teacher1@example.com")
    admin = login(client, "admin@example.com")

    files = [pdf("a.pdf", b"%PDF-1.4 first"), pdf("b.pdf", b"%PDF-1.4 second")]
    sub_id = submit(client, student, seed["hw1"], files=files).json()["submission"]["id"]

    for token in (student, teacher, admin):
        r = client.get(f"/submissions/{sub_id}/files/1", headers=auth_header(token))
        assert r.status_code == 200, r.text
        assert r.content == b"%PDF-1.4 second"
        assert r.headers["content-type"] == "application/pdf"
        assert "b.pdf" in r.headers["content-disposition"]


def test_download_submission_file_permissions(client, seed):
    student = login(client, "student1@example.com")
    other = login(client, "student2@example.com")
    other_teacher = login(client, "teacher2@example.com")
    sub_id = submit(client, student, seed["hw1"]).json()["submission"]["id"]

    for token in (other, other_teacher):
        r = client.get(f"/submissions/{sub_id}/files/0", headers=auth_header(token))
        assert r.status_code == 403

    r = client.get(f"/submissions/{sub_id}/files/7", headers=auth_header(student))
    assert r.status_code == 404
    assert r.json()["detail"] == "File not found"

    r = client.get("/submissions/999999/files/0", headers=auth_header(student))
    assert r.status_code == 404

    r = client.get(f"/submissions/{sub_id}/files/0")
    assert r.status_code == 401
