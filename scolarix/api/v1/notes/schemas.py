from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.schemas import PartialUpdate


class NoteCreate(BaseModel):
    student_id: str = Field(..., min_length=1, max_length=20, description="Student registration number")
    evaluation_code: str = Field(..., min_length=1, max_length=10)
    composition_code: str = Field(..., min_length=1, max_length=10)
    value: float = Field(..., ge=0, le=10)


class NoteUpdate(PartialUpdate):
    value: Optional[float] = Field(None, ge=0, le=10)


class NoteResponse(BaseModel):
    student_id: str
    evaluation_code: str
    composition_code: str
    value: float

    class Config:
        from_attributes = True
