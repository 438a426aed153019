# school/core/logging.py
import logging
import sys

from school.core.config import settings


# Configure standard Python logging
def setup_logging(level: str = None) -> logging.Logger:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)  # Print logs to console
        ],
        force=True,
    )
    return logging.getLogger("school")


logger = logging.getLogger("school")
