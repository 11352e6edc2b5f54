import logging
import sys

from taskforge.core.config import settings


def setup_logging():
    """
    Configure logging for the application.

    Logs go to stdout with timestamps, levels and logger names so they are
    picked up by Docker / Kubernetes log collectors unchanged.
    """
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Reduce SQLAlchemy noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("taskforge")


# Create global logger instance
logger = setup_logging()
