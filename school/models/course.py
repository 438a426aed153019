from sqlalchemy import CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship
from school.core.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    course_code = Column(String(10), nullable=False)  # e.g. "CSCI473"
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=False, default="")
    credits = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("credits >= 1 AND credits <= 6", name="ck_courses_credits_range"),
    )

    enrollments = relationship(
        "Enrollment",
        back_populates="course",
        cascade="save-update, merge, delete",
        passive_deletes=True,
        lazy="raise_on_sql",
    )

    def __str__(self):
        return f"{self.course_code}: {self.title} ({self.credits} credits)"

    def __repr__(self):
        return f"<Course id={self.id} code={self.course_code!r}>"
