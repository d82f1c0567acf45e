from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.enums import CompositionType
from scolarix.core.schemas import SCHOOL_YEAR_PATTERN, PartialUpdate


class CompositionCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=10)
    label: str = Field(..., min_length=1, max_length=50)
    composition_date: date
    type: CompositionType
    school_year_code: str = Field(..., pattern=SCHOOL_YEAR_PATTERN)


class CompositionUpdate(PartialUpdate):
    label: Optional[str] = Field(None, min_length=1, max_length=50)
    composition_date: Optional[date] = None
    type: Optional[CompositionType] = None
    school_year_code: Optional[str] = Field(None, pattern=SCHOOL_YEAR_PATTERN)


class CompositionResponse(BaseModel):
    code: str
    label: str
    composition_date: date
    type: CompositionType
    school_year_code: str

    class Config:
        from_attributes = True
