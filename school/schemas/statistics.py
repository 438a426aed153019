from typing import Optional

from pydantic import BaseModel


class SchoolStatistics(BaseModel):
    total_students: int
    total_courses: int
    total_enrollments: int
    average_credits: Optional[float] = None
