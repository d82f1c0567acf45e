from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.enums import Gender
from scolarix.core.schemas import SCHOOL_ID_PATTERN, PartialUpdate


class StudentCreate(BaseModel):
    registration_number: str = Field(..., min_length=1, max_length=20)
    last_name: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    gender: Gender
    class_id: str = Field(..., min_length=1, max_length=10)
    school_id: str = Field(..., pattern=SCHOOL_ID_PATTERN)


class StudentUpdate(PartialUpdate):
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[Gender] = None
    class_id: Optional[str] = Field(None, min_length=1, max_length=10)
    school_id: Optional[str] = Field(None, pattern=SCHOOL_ID_PATTERN)


class StudentResponse(BaseModel):
    registration_number: str
    last_name: str
    first_name: str
    gender: Gender
    class_id: str
    school_id: str

    class Config:
        from_attributes = True
