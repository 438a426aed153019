from typing import List, NamedTuple, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy import inspect
from sqlalchemy.orm.base import NO_VALUE

from school.models.course import Course
from school.models.enrollment import Enrollment
from school.models.student import Student
from school.schemas.course import CourseBase
from school.schemas.enrollment import EnrollmentBase
from school.schemas.student import StudentBase


class ValidationIssue(NamedTuple):
    field: str
    message: str


def _check(schema: Type[BaseModel], entity) -> List[ValidationIssue]:
    try:
        schema.model_validate(entity)
    except ValidationError as e:
        return [
            ValidationIssue(".".join(str(x) for x in error["loc"]), error["msg"])
            for error in e.errors()
        ]
    return []


def validate_student(student: Student) -> List[ValidationIssue]:
    return _check(StudentBase, student)


def validate_course(course: Course) -> List[ValidationIssue]:
    issues = _check(CourseBase, course)

    # The column default fills in a missing description on insert only
    if course.description is None and not inspect(course).has_identity:
        issues = [issue for issue in issues if issue.field != "description"]
    return issues


def validate_enrollment(enrollment: Enrollment) -> List[ValidationIssue]:
    issues = _check(EnrollmentBase, enrollment)

    # A parent may be given either by key or by relationship
    state = inspect(enrollment)
    for key, relation in (("student_id", "student"), ("course_id", "course")):
        if getattr(enrollment, key) is None:
            parent = state.attrs[relation].loaded_value
            if parent is NO_VALUE or parent is None:
                issues.append(ValidationIssue(key, "Field required"))
    return issues


VALIDATORS = {
    Student: validate_student,
    Course: validate_course,
    Enrollment: validate_enrollment,
}


def validate_entity(entity) -> List[ValidationIssue]:
    """Return every rule the entity breaks; an empty list means valid."""
    try:
        validator = VALIDATORS[type(entity)]
    except KeyError:
        raise TypeError(f"No validation rules for {type(entity).__name__}")
    return validator(entity)
