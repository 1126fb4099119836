from typing import Iterator

from sqlalchemy.orm import Session

from submission_portal.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    """One session per request: the store handle every operation receives."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        # a failed request must not leave a transaction open on its session
        db.rollback()
        raise
    finally:
        db.close()
