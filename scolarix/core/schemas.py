from typing import Any, Dict, Generic, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Single-record envelope: {success, data}."""

    success: bool = True
    data: T


class DeletedResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any] = Field(default_factory=dict)


class PartialUpdate(BaseModel):
    """Base for update payloads: every field optional, at least one required."""

    @model_validator(mode="after")
    def _require_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


SCHOOL_ID_PATTERN = r"^EC[0-9]{3}$"
SCHOOL_YEAR_PATTERN = r"^[0-9]{4}-[0-9]{4}$"
