from typing import List, Optional, Tuple

from school.data.context import SchoolContext
from school.models.course import Course
from school.schemas.course import CourseCreate


def get_course(db: SchoolContext, course_id: int) -> Optional[Course]:
    return db.courses.find(course_id)


def get_courses(db: SchoolContext) -> List[Course]:
    return db.courses.order_by(Course.id).to_list()


def get_courses_ordered_by_title(db: SchoolContext) -> List[Course]:
    return db.courses.order_by(Course.title).to_list()


def create_course(db: SchoolContext, course: CourseCreate) -> Course:
    """Create a new course"""
    db_course = Course(
        course_code=course.course_code,
        title=course.title,
        description=course.description,
        credits=course.credits
    )
    db.courses.add(db_course)
    db.save_changes()
    return db_course


def update_credits(db: SchoolContext, from_credits: int, to_credits: int) -> int:
    """Move every course worth from_credits to to_credits; returns how many changed."""
    courses = db.courses.where(Course.credits == from_credits).to_list()
    for course in courses:
        course.credits = to_credits
    db.save_changes()
    return len(courses)


def get_courses_by_credits(db: SchoolContext) -> List[Tuple[int, int]]:
    """(credits, number of courses) ordered by credits"""
    return db.courses.query().group_count(Course.credits)


def get_average_credits(db: SchoolContext) -> Optional[float]:
    return db.courses.query().average(Course.credits)
