from school.data.context import SchoolContext
from school.models.course import Course
from school.schemas.statistics import SchoolStatistics


def get_statistics(db: SchoolContext) -> SchoolStatistics:
    """Totals per table and the average course credits"""
    return SchoolStatistics(
        total_students=db.students.count(),
        total_courses=db.courses.count(),
        total_enrollments=db.enrollments.count(),
        average_credits=db.courses.query().average(Course.credits),
    )
