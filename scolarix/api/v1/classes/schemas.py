from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.schemas import SCHOOL_ID_PATTERN, SCHOOL_YEAR_PATTERN, PartialUpdate


class ClassCreate(BaseModel):
    class_id: str = Field(..., min_length=1, max_length=10)
    label: str = Field(..., min_length=1, max_length=50)
    level: str = Field(..., min_length=1, max_length=20)
    school_year_code: str = Field(..., pattern=SCHOOL_YEAR_PATTERN)
    school_id: str = Field(..., pattern=SCHOOL_ID_PATTERN)


class ClassUpdate(PartialUpdate):
    label: Optional[str] = Field(None, min_length=1, max_length=50)
    level: Optional[str] = Field(None, min_length=1, max_length=20)
    school_year_code: Optional[str] = Field(None, pattern=SCHOOL_YEAR_PATTERN)
    school_id: Optional[str] = Field(None, pattern=SCHOOL_ID_PATTERN)


class ClassResponse(BaseModel):
    class_id: str
    label: str
    level: str
    school_year_code: str
    school_id: str

    class Config:
        from_attributes = True
