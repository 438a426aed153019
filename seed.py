import logging

from school.core.database import init_db
from school.core.exceptions import SchoolDataError
from school.core.logging import setup_logging

logger = logging.getLogger(__name__)


def seed_data() -> bool:
    """
    Create the school schema and its seed rows if they are missing.
    Running it again against an existing database changes nothing.
    """
    created = init_db()
    if created:
        logger.info("✓ Database created successfully!")
    else:
        logger.info("✓ Database already exists. Skipping seed.")
    return created


if __name__ == "__main__":
    setup_logging()
    try:
        seed_data()
    except SchoolDataError as e:
        logger.error(f"❌ Error seeding data: {e.message}")
        raise SystemExit(1)
