from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

EMAIL_MAX_LENGTH = 200


class StudentBase(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    date_of_birth: date

    model_config = ConfigDict(from_attributes=True)

    @field_validator("email", mode="before")
    @classmethod
    def check_email_length(cls, v):
        if isinstance(v, str) and len(v) > EMAIL_MAX_LENGTH:
            raise ValueError(f"String should have at most {EMAIL_MAX_LENGTH} characters")
        return v


class StudentCreate(StudentBase):
    pass
