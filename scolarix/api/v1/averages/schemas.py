from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.schemas import PartialUpdate


class AverageCompute(BaseModel):
    """Compute (or recompute) the weighted average of a student for one composition."""

    student_id: str = Field(..., min_length=1, max_length=20)
    composition_code: str = Field(..., min_length=1, max_length=10)


class AverageUpdate(PartialUpdate):
    value: Optional[float] = Field(None, ge=0, le=10)


class AverageResponse(BaseModel):
    student_id: str
    composition_code: str
    value: float

    class Config:
        from_attributes = True
