from typing import Any, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors, carrying a stable error code."""

    def __init__(
        self,
        message: str,
        code: str = "SERVER_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def to_body(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"success": False, "error": error}


def not_found(label: str) -> ServiceError:
    return ServiceError(f"{label} not found", "NOT_FOUND", status.HTTP_404_NOT_FOUND)


def from_integrity_error(exc) -> ServiceError:
    """Map a database constraint violation to a client error without exposing the driver message."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    text = str(orig if orig is not None else exc).lower()

    if sqlstate == "23505" or "unique constraint" in text:
        return ServiceError(
            "A record with the same unique value already exists",
            "UNIQUE_CONSTRAINT",
            status.HTTP_409_CONFLICT,
        )
    if sqlstate == "23503" or "foreign key constraint" in text:
        return ServiceError(
            "The record is referenced by, or references, data that prevents this operation",
            "FOREIGN_KEY_CONSTRAINT",
            status.HTTP_409_CONFLICT,
        )
    return ServiceError(
        "The data violates a database constraint",
        "VALIDATION_ERROR",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
