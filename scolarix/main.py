import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from scolarix.api.v1.auth.router import router as auth_router
from scolarix.api.v1.averages.router import router as averages_router
from scolarix.api.v1.classes.router import router as classes_router
from scolarix.api.v1.compositions.router import router as compositions_router
from scolarix.api.v1.evaluation_types.router import router as evaluation_types_router
from scolarix.api.v1.health.router import router as health_router
from scolarix.api.v1.notes.router import router as notes_router
from scolarix.api.v1.results.router import router as results_router
from scolarix.api.v1.school_years.router import router as school_years_router
from scolarix.api.v1.schools.router import router as schools_router
from scolarix.api.v1.students.router import router as students_router
from scolarix.api.v1.users.router import router as users_router
from scolarix.core.config import settings
from scolarix.core.error_handlers import register_exception_handlers
from scolarix.core.logging import setup_logging
from scolarix.db.session import engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = setup_logging(settings.log_level)
    app.state.started_at = time.monotonic()
    logger.info(
        "starting scolarix api: environment=%s prefix=%s database=%s",
        settings.environment,
        settings.api_prefix,
        make_url(settings.database_url).get_backend_name(),
    )
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; login and authenticated routes will fail")
    yield
    await engine.dispose()
    logger.info("scolarix api stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="Scolarix API", version="1.0.0", lifespan=lifespan)

    # CORS: any origin in development, ALLOWED_ORIGINS otherwise
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    for router in (
        auth_router,
        users_router,
        schools_router,
        school_years_router,
        classes_router,
        students_router,
        evaluation_types_router,
        compositions_router,
        notes_router,
        averages_router,
        results_router,
    ):
        app.include_router(router, prefix=settings.api_prefix)

    return app


app = create_app()
