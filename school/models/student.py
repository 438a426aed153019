from datetime import date

from sqlalchemy import Column, Date, Integer, String
from sqlalchemy.orm import relationship
from school.core.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(200), nullable=False)
    date_of_birth = Column(Date, nullable=False)

    # Dependent enrollments are deleted with the student. Reading the
    # collection never loads it implicitly: eager-load it or call
    # SchoolContext.load().
    enrollments = relationship(
        "Enrollment",
        back_populates="student",
        cascade="save-update, merge, delete",
        passive_deletes=True,
        lazy="raise_on_sql",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def age_on(self, day: date) -> int:
        """Age in whole years on the given day."""
        age = day.year - self.date_of_birth.year
        if (self.date_of_birth.month, self.date_of_birth.day) > (day.month, day.day):
            age -= 1
        return age

    @property
    def age(self) -> int:
        return self.age_on(date.today())

    def __str__(self):
        return f"{self.full_name} (Age: {self.age}, Email: {self.email})"

    def __repr__(self):
        return f"<Student id={self.id} name={self.full_name!r}>"
