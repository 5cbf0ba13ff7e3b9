"""
MealLog FastAPI Application
Restaurant meal journal: meals, their companions and ratings, and photos stored
inside the meal rows (QOI, or the original upload when QOI fails).
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio

from api.routes import meals, images, catalog, stats, health
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    service_validation_exception_handler,
    not_found_exception_handler,
    conflict_exception_handler,
    image_processing_exception_handler,
    general_exception_handler,
)
from app.config import settings
from app.exceptions import (
    ServiceValidationError,
    NotFoundError,
    ConflictError,
    ImageProcessingError,
)
from domain.models import init_database

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("meallog.main")


async def _create_tables() -> None:
    """
    Create tables, retrying while the database comes up (e.g. a Postgres
    container started alongside the API).
    """
    attempts = settings.db_init_attempts
    for attempt in range(1, attempts + 1):
        try:
            await anyio.to_thread.run_sync(init_database)
        except Exception as exc:
            if attempt == attempts:
                _logger.error("Database initialization failed after %d attempts", attempt)
                raise
            _logger.warning(
                "Database init attempt %d/%d failed: %s", attempt, attempts, exc
            )
            await anyio.sleep(settings.db_init_delay_sec)
        else:
            _logger.info("Database ready after %d attempt(s)", attempt)
            return


@asynccontextmanager
async def lifespan(app: FastAPI):
    _logger.info(f"Starting {settings.app_name} in {settings.environment.value} mode")
    await _create_tables()
    _logger.info(
        f"image_pipeline max_dimension={settings.image_max_dimension} "
        f"max_upload_bytes={settings.image_max_upload_bytes} "
        f"cache_control='{settings.image_cache_control}'"
    )
    yield
    _logger.info(f"Shutting down {settings.app_name}")


_docs_enabled = not settings.is_production()

app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=f"{settings.api_prefix}/openapi.json" if _docs_enabled else None,
    docs_url=f"{settings.api_prefix}/docs" if _docs_enabled else None,
    redoc_url=f"{settings.api_prefix}/redoc" if _docs_enabled else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

# Handlers are matched on the exception's MRO, so 413/415 reach the
# ServiceValidationError handler and PayloadMissing the NotFoundError one
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(ServiceValidationError, service_validation_exception_handler)
app.add_exception_handler(NotFoundError, not_found_exception_handler)
app.add_exception_handler(ConflictError, conflict_exception_handler)
app.add_exception_handler(ImageProcessingError, image_processing_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

for router in (
    meals.router,
    images.router,
    catalog.restaurants_router,
    catalog.dishes_router,
    catalog.people_router,
    stats.router,
    health.router,
):
    app.include_router(router, prefix=settings.api_prefix)

# Photos from before images moved into the database
app.mount(
    "/uploads",
    StaticFiles(directory=settings.legacy_upload_dir, check_dir=False),
    name="uploads",
)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
