import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from scolarix.core.config import settings
from scolarix.core.exceptions import ServiceError, from_integrity_error
from scolarix.core.logging import get_logger

logger = get_logger("errors")


def _caller(request: Request) -> str:
    identity = getattr(request.state, "identity", None)
    return f"user={identity.id}" if identity is not None else "anonymous"


def _respond(error: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        else:
            logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.code, _caller(request))
        return _respond(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return _respond(
            ServiceError(
                "Request validation failed",
                "VALIDATION_ERROR",
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                details=details,
            )
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        error = from_integrity_error(exc)
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, error.code, exc.orig)
        return _respond(error)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
        return _respond(ServiceError(str(exc.detail), code, exc.status_code))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unhandled error on %s %s (%s)", request.method, request.url.path, _caller(request)
        )
        details = None
        if settings.is_development:
            details = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return _respond(ServiceError("Internal server error", "SERVER_ERROR", details=details))
