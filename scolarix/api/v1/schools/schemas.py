from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.schemas import SCHOOL_ID_PATTERN, PartialUpdate


class SchoolCreate(BaseModel):
    school_id: str = Field(..., pattern=SCHOOL_ID_PATTERN, description="e.g. EC001")
    name: str = Field(..., min_length=3, max_length=100)
    inspection_district: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=50)


class SchoolUpdate(PartialUpdate):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    inspection_district: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=50)


class SchoolResponse(BaseModel):
    school_id: str
    name: str
    inspection_district: Optional[str] = None
    city: Optional[str] = None

    class Config:
        from_attributes = True
