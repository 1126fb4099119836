from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from submission_portal.services.lateness import as_utc

# SQLite gives back naive datetimes; everything we store is UTC
UTCDatetime = Annotated[datetime, AfterValidator(as_utc)]
