"""
API dependencies for dependency injection
"""

from functools import lru_cache
from typing import Generator
from sqlalchemy.orm import Session

from app.config import settings
from domain.models import get_db_session
from services.image import (
    DynamicImageServer,
    ImageStoragePolicy,
    PixelCodecAdapter,
)


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


@lru_cache
def get_pixel_codec() -> PixelCodecAdapter:
    """QOI codec adapter configured from settings (stateless, shared)"""
    return PixelCodecAdapter(max_dimension=settings.image_max_dimension)


def get_storage_policy() -> ImageStoragePolicy:
    return ImageStoragePolicy(
        get_pixel_codec(),
        fallback_size=settings.image_fallback_size,
    )


def get_image_server() -> DynamicImageServer:
    return DynamicImageServer(
        get_pixel_codec(),
        default_size=settings.image_fallback_size,
    )
