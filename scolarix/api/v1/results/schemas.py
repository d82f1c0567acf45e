from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.enums import Decision
from scolarix.core.schemas import SCHOOL_YEAR_PATTERN, PartialUpdate


class ResultUpsert(BaseModel):
    """Administrator-supplied annual result. Posting again for the same key overwrites it."""

    student_id: str = Field(..., min_length=1, max_length=20)
    school_year_code: str = Field(..., pattern=SCHOOL_YEAR_PATTERN)
    decision: Decision
    rank: int = Field(..., ge=1)
    annual_average: float = Field(..., ge=0, le=10)


class ResultUpdate(PartialUpdate):
    decision: Optional[Decision] = None
    rank: Optional[int] = Field(None, ge=1)
    annual_average: Optional[float] = Field(None, ge=0, le=10)


class ResultResponse(BaseModel):
    student_id: str
    school_year_code: str
    decision: Decision
    rank: int
    annual_average: float

    class Config:
        from_attributes = True
