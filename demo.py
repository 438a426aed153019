"""
Walk through the school data layer step by step:

1. create the database (and seed it) if it is missing
2. read data: all students, filtered students, ordered courses
3. create a student, a course and an enrollment
4. update a student's email and course credits
5. delete a student (with their enrollments) and ungraded enrollments
6. eager loading, relationship filters, aggregates and grouping
"""
import logging
from datetime import date

from school.core.config import settings
from school.core.database import ensure_created
from school.core.handlers import error_response
from school.core.logging import setup_logging
from school.data.context import SchoolContext
from school.schemas.course import CourseCreate
from school.schemas.enrollment import EnrollmentCreate
from school.schemas.student import StudentCreate
from school.services import course as crud_course
from school.services import enrollment as crud_enrollment
from school.services import statistics
from school.services import student as crud_student

logger = logging.getLogger(__name__)


def create_database():
    if ensure_created():
        print("✓ Database created successfully!")
    else:
        print("✓ Database already exists.")


def read_data():
    with SchoolContext() as db:
        print("All Students:")
        for student in crud_student.get_students(db):
            print(f"  - {student}")

        print("\nStudents with 'J' in their first name:")
        for student in crud_student.get_students_with_first_name_containing(db, "J"):
            print(f"  - {student}")

        print("\nCourses ordered by title:")
        for course in crud_course.get_courses_ordered_by_title(db):
            print(f"  - {course}")


def create_data():
    with SchoolContext() as db:
        student = crud_student.create_student(db, StudentCreate(
            first_name="Alice",
            last_name="Wonderland",
            email="alice.wonderland@university.edu",
            date_of_birth=date(2002, 7, 4),
        ))
        course = crud_course.create_course(db, CourseCreate(
            course_code="CSCI340",
            title="Data Structures and Algorithms",
            description="Data Structures",
            credits=4,
        ))
        print(f"✓ Added new student: {student.full_name}")
        print(f"✓ Added new course: {course.title}")

        crud_enrollment.enroll_student(db, EnrollmentCreate(
            student_id=student.id,
            course_id=course.id,
        ))
        print(f"✓ Enrolled {student.full_name} in {course.title}")


def update_data():
    with SchoolContext() as db:
        student = crud_student.get_student_by_first_name(db, "John")
        if student is not None:
            print(f"Updating student: {student.full_name}")
            crud_student.update_student_email(db, student.id, "john.doe.updated@university.edu")
            print(f"✓ Updated email for {student.full_name}")

        print("Updating course credits...")
        changed = crud_course.update_credits(db, from_credits=3, to_credits=4)
        print(f"✓ Updated {changed} courses to 4 credits")


def delete_data():
    with SchoolContext() as db:
        student = crud_student.get_student_by_first_name(db, "Bob")
        if student is not None:
            print(f"Deleting student: {student.full_name}")
            crud_student.delete_student(db, student.id)
            print(f"✓ Deleted {student.full_name} and their enrollments")

        print("Deleting enrollments without grades...")
        deleted = crud_enrollment.delete_ungraded_enrollments(db)
        print(f"✓ Deleted {deleted} ungraded enrollments")


def advanced_queries():
    with SchoolContext() as db:
        print("Students with their enrollments:")
        for student in crud_student.get_students_with_enrollments(db):
            print(f"\n{student.full_name}:")
            for enrollment in student.enrollments:
                print(f"  - {enrollment.course.title} (Grade: {enrollment.grade_text})")

        print("\nStudents enrolled in Software Engineering:")
        for student in crud_student.get_students_enrolled_in(db, "Software Engineering"):
            print(f"  - {student.full_name}")

        stats = statistics.get_statistics(db)
        print("\nStatistics:")
        print(f"  - Total Students: {stats.total_students}")
        print(f"  - Total Courses: {stats.total_courses}")
        print(f"  - Total Enrollments: {stats.total_enrollments}")
        if stats.average_credits is not None:
            print(f"  - Average Course Credits: {stats.average_credits:.1f}")

        print("\nCourses by credit count:")
        for credits, count in crud_course.get_courses_by_credits(db):
            print(f"  - {credits} credit(s): {count} course(s)")


def main() -> int:
    print("=" * 80)
    print(f"🎓 {settings.PROJECT_NAME} demo")
    print("=" * 80)

    steps = [
        ("1. Creating database...", create_database),
        ("2. Reading data from database...", read_data),
        ("3. Adding new records...", create_data),
        ("4. Updating existing records...", update_data),
        ("5. Deleting records...", delete_data),
        ("6. Advanced queries and relationships...", advanced_queries),
    ]
    try:
        for title, step in steps:
            print(f"\n{title}")
            step()
    except Exception as e:
        error = error_response(e)["error"]
        print(f"\nError: {error['message']}")
        if error["details"]:
            print(f"Details: {error['details']}")
        return 1
    return 0


if __name__ == "__main__":
    setup_logging()
    raise SystemExit(main())
