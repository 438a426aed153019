from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EnrollmentBase(BaseModel):
    # Ids may still be unset on a pending enrollment linked through its
    # relationships; the parent keys are checked separately.
    student_id: Optional[int] = None
    course_id: Optional[int] = None
    grade: Optional[str] = Field(default=None, max_length=2)
    enrollment_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EnrollmentCreate(EnrollmentBase):
    student_id: int
    course_id: int
