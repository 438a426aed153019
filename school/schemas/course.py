from pydantic import BaseModel, ConfigDict, Field


class CourseBase(BaseModel):
    course_code: str = Field(min_length=1, max_length=10)
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    credits: int = Field(ge=1, le=6)

    model_config = ConfigDict(from_attributes=True)


class CourseCreate(CourseBase):
    pass
