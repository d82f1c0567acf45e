from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.schemas import SCHOOL_YEAR_PATTERN, PartialUpdate


class SchoolYearCreate(BaseModel):
    code: str = Field(..., pattern=SCHOOL_YEAR_PATTERN, description="e.g. 2024-2025")
    label: str = Field(..., min_length=1, max_length=10)


class SchoolYearUpdate(PartialUpdate):
    label: Optional[str] = Field(None, min_length=1, max_length=10)


class SchoolYearResponse(BaseModel):
    code: str
    label: str

    class Config:
        from_attributes = True
