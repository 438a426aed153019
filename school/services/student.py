from typing import List, Optional

from school.core.exceptions import EntityNotFoundError
from school.data.context import SchoolContext
from school.models.course import Course
from school.models.enrollment import Enrollment
from school.models.student import Student
from school.schemas.student import StudentCreate


def get_student(db: SchoolContext, student_id: int) -> Optional[Student]:
    """Get one student by id"""
    return db.students.find(student_id)


def get_student_by_first_name(db: SchoolContext, first_name: str) -> Optional[Student]:
    """Get the first student with this exact first name"""
    return db.students.where(Student.first_name == first_name).order_by(Student.id).first()


def get_students(db: SchoolContext) -> List[Student]:
    """Get every student"""
    return db.students.order_by(Student.id).to_list()


def get_students_with_first_name_containing(db: SchoolContext, text: str) -> List[Student]:
    """Students whose first name contains the given text"""
    return db.students.where(Student.first_name.contains(text)).to_list()


def get_students_with_enrollments(db: SchoolContext) -> List[Student]:
    """
    Students with their enrollments and each enrollment's course loaded,
    so both can be navigated without another query.
    """
    return (
        db.students
        .include(Student.enrollments, Enrollment.course)
        .order_by(Student.id)
        .to_list()
    )


def get_students_enrolled_in(db: SchoolContext, course_title: str) -> List[Student]:
    """Students holding an enrollment in a course with this title"""
    return db.students.where(
        Student.enrollments.any(Enrollment.course.has(Course.title == course_title))
    ).to_list()


def create_student(db: SchoolContext, student: StudentCreate) -> Student:
    """Create a new student"""
    db_student = Student(
        first_name=student.first_name,
        last_name=student.last_name,
        email=student.email,
        date_of_birth=student.date_of_birth
    )
    db.students.add(db_student)
    db.save_changes()
    return db_student


def update_student_email(db: SchoolContext, student_id: int, email: str) -> Student:
    """Change a student's email"""
    db_student = get_student(db, student_id)
    if db_student is None:
        raise EntityNotFoundError(f"Student {student_id} not found")
    db_student.email = email
    db.save_changes()
    return db_student


def delete_student(db: SchoolContext, student_id: int) -> Optional[Student]:
    """Delete a student and their enrollments"""
    db_student = get_student(db, student_id)
    if db_student:
        db.students.remove(db_student)
        db.save_changes()
    return db_student
