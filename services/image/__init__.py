"""Meal photo pipeline: QOI codec adapter, storage fallback policy, upload staging, image server"""

from services.image.codec import (
    PixelCodecAdapter,
    ImageDimensions,
    CompactEncoded,
    RawFallback,
)
from services.image.storage_policy import ImageStoragePolicy, StoredImage
from services.image.image_server import DynamicImageServer, RenderedImage
from services.image.uploads import (
    ingest_upload,
    stage_upload,
    safe_delete_file,
    delete_legacy_photo,
)

__all__ = [
    "PixelCodecAdapter",
    "ImageDimensions",
    "CompactEncoded",
    "RawFallback",
    "ImageStoragePolicy",
    "StoredImage",
    "DynamicImageServer",
    "RenderedImage",
    "ingest_upload",
    "stage_upload",
    "safe_delete_file",
    "delete_legacy_photo",
]
