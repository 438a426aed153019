from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import relationship
from sqlalchemy.orm.exc import DetachedInstanceError
from school.core.database import Base


class Enrollment(Base):
    """Junction row between a student and a course, with its own grade and date."""
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(
        Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    grade = Column(String(2), nullable=True)  # A, B+, ... or NULL when not graded
    enrollment_date = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        # A student can be enrolled in a course only once
        Index("IX_Enrollment_Student_Course", "student_id", "course_id", unique=True),
    )

    student = relationship("Student", back_populates="enrollments", lazy="raise_on_sql")
    course = relationship("Course", back_populates="enrollments", lazy="raise_on_sql")

    @property
    def grade_text(self) -> str:
        return self.grade if self.grade is not None else "Not Graded"

    def _related(self, relation: str):
        # Loaded or in the identity map; never a new read
        try:
            return getattr(self, relation)
        except (InvalidRequestError, DetachedInstanceError):
            return None

    def __str__(self):
        student = self._related("student")
        course = self._related("course")
        student_name = student.full_name if student is not None else f"Student #{self.student_id}"
        course_title = course.title if course is not None else f"Course #{self.course_id}"
        return f"{student_name} enrolled in {course_title} (Grade: {self.grade_text})"

    def __repr__(self):
        return (
            f"<Enrollment id={self.id} student_id={self.student_id} "
            f"course_id={self.course_id} grade={self.grade!r}>"
        )
