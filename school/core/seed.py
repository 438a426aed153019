import logging
from datetime import date, datetime, timedelta
from typing import Dict, List

from sqlalchemy import insert, text
from sqlalchemy.engine import Connection

from school.models.course import Course
from school.models.enrollment import Enrollment
from school.models.student import Student

logger = logging.getLogger(__name__)


def seed_rows(now: datetime = None) -> Dict[type, List[dict]]:
    """
    Initial rows written when the schema is first created.
    Ids are fixed so enrollments can reference them.
    """
    now = now or datetime.now()
    return {
        Student: [
            {"id": 1, "first_name": "John", "last_name": "Doe",
             "email": "john.doe@university.edu", "date_of_birth": date(2000, 5, 15)},
            {"id": 2, "first_name": "Jane", "last_name": "Smith",
             "email": "jane.smith@university.edu", "date_of_birth": date(1999, 8, 22)},
            {"id": 3, "first_name": "Bob", "last_name": "Johnson",
             "email": "bob.johnson@university.edu", "date_of_birth": date(2001, 3, 10)},
        ],
        Course: [
            {"id": 1, "course_code": "CSCI473", "title": "C#",
             "description": "C#", "credits": 3},
            {"id": 2, "course_code": "CSCI470", "title": "Java Development",
             "description": "Java", "credits": 3},
            {"id": 3, "course_code": "CSCI467", "title": "Software Engineering",
             "description": "Software development methodologies and practices", "credits": 3},
        ],
        Enrollment: [
            {"id": 1, "student_id": 1, "course_id": 1, "grade": "A",
             "enrollment_date": now - timedelta(days=30)},
            {"id": 2, "student_id": 1, "course_id": 2, "grade": "B+",
             "enrollment_date": now - timedelta(days=25)},
            {"id": 3, "student_id": 2, "course_id": 1, "grade": "A-",
             "enrollment_date": now - timedelta(days=20)},
            {"id": 4, "student_id": 2, "course_id": 3, "grade": None,
             "enrollment_date": now - timedelta(days=15)},
            {"id": 5, "student_id": 3, "course_id": 2, "grade": "B",
             "enrollment_date": now - timedelta(days=10)},
        ],
    }


def seed_database(connection: Connection) -> None:
    """Insert the seed rows inside the caller's transaction."""
    logger.info("Seeding data...")

    for model, rows in seed_rows().items():
        connection.execute(insert(model.__table__), rows)

        # Explicit ids do not advance PostgreSQL sequences
        if connection.dialect.name == "postgresql":
            table = model.__tablename__
            connection.execute(
                text(f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                     f"(SELECT MAX(id) FROM {table}))")
            )

    logger.info("✅ Data seeded successfully!")
