from datetime import datetime
from typing import List, Optional

from school.core.exceptions import EntityNotFoundError
from school.data.context import SchoolContext
from school.models.enrollment import Enrollment
from school.schemas.enrollment import EnrollmentCreate


def enroll_student(db: SchoolContext, enrollment: EnrollmentCreate) -> Enrollment:
    """
    Enroll a student in a course.

    Raises ConstraintViolationError if the student is already enrolled in
    the course or either side does not exist.
    """
    db_enrollment = Enrollment(
        student_id=enrollment.student_id,
        course_id=enrollment.course_id,
        grade=enrollment.grade,
        enrollment_date=enrollment.enrollment_date or datetime.now()
    )
    db.enrollments.add(db_enrollment)
    db.save_changes()
    return db_enrollment


def assign_grade(db: SchoolContext, enrollment_id: int, grade: Optional[str]) -> Enrollment:
    """Set or clear the grade of an enrollment"""
    db_enrollment = db.enrollments.find(enrollment_id)
    if db_enrollment is None:
        raise EntityNotFoundError(f"Enrollment {enrollment_id} not found")
    db_enrollment.grade = grade
    db.save_changes()
    return db_enrollment


def get_ungraded_enrollments(db: SchoolContext) -> List[Enrollment]:
    return db.enrollments.where(Enrollment.grade.is_(None)).to_list()


def count_ungraded_enrollments(db: SchoolContext) -> int:
    return db.enrollments.where(Enrollment.grade.is_(None)).count()


def delete_ungraded_enrollments(db: SchoolContext) -> int:
    """Delete enrollments without a grade; returns how many were removed."""
    enrollments = get_ungraded_enrollments(db)
    db.enrollments.remove_range(enrollments)
    db.save_changes()
    return len(enrollments)
