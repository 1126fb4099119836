from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    # SQLite often returns naive datetimes; treat as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_late(now: datetime, deadline: datetime) -> bool:
    """A submission is late only when strictly after the deadline.

    Submitting at the exact deadline instant counts as on time. The result is
    meant to be taken once, at intake, and stored on the submission.
    """
    return as_utc(now) > as_utc(deadline)
