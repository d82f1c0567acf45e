from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.schemas import PartialUpdate


class EvaluationTypeCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=10)
    name: str = Field(..., min_length=1, max_length=50)
    coefficient: float = Field(..., gt=0, description="Weight of this evaluation type in averages")


class EvaluationTypeUpdate(PartialUpdate):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    coefficient: Optional[float] = Field(None, gt=0)


class EvaluationTypeResponse(BaseModel):
    code: str
    name: str
    coefficient: float

    class Config:
        from_attributes = True
