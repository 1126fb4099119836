import logging

from submission_portal.db.base import Base
from submission_portal.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("database tables ready (%s)", engine.url.render_as_string(hide_password=True))
