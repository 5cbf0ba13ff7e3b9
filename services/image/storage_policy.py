"""
Storage fallback policy: decide, once per upload, how a photo is persisted.
"""

import logging
from typing import Tuple, Union

from app.exceptions import ImageEncodeError, UnknownDimensionsError
from services.image.codec import (
    CompactEncoded,
    ImageDimensions,
    PixelCodecAdapter,
    RawFallback,
    to_text,
)
from services.image.result import attempt

logger = logging.getLogger("meallog.image.storage")

StoredImage = Union[CompactEncoded, RawFallback]

DEFAULT_FALLBACK_SIZE = (800, 600)


class ImageStoragePolicy:
    """
    Compact-codec first, original bytes as the single fallback.

    The choice is made at write time and never revisited; a record only moves
    to the other representation when its photo is replaced.
    """

    def __init__(
        self,
        codec: PixelCodecAdapter,
        fallback_size: Tuple[int, int] = DEFAULT_FALLBACK_SIZE,
    ):
        self.codec = codec
        self.fallback_size = ImageDimensions(*fallback_size)

    def prepare(self, image_bytes: bytes) -> StoredImage:
        """Return the representation to persist for these upload bytes"""
        outcome = attempt(
            self.codec.encode,
            image_bytes,
            catch=(ImageEncodeError, UnknownDimensionsError),
        )
        stored = outcome.unwrap_or_else(lambda error: self._raw_fallback(image_bytes, error))
        if outcome.ok:
            logger.info(
                "image_stored encoding=%s width=%d height=%d payload_length=%d",
                stored.encoding.value,
                stored.width,
                stored.height,
                len(stored.data),
            )
        return stored

    def _raw_fallback(self, image_bytes: bytes, error: Exception) -> RawFallback:
        logger.warning("QOI processing failed, falling back to base64: %s", error)
        width, height = attempt(
            self.codec.read_dimensions, image_bytes, catch=UnknownDimensionsError
        ).unwrap_or_else(lambda _: self.fallback_size)
        fallback = RawFallback(data=to_text(image_bytes), width=width, height=height)
        logger.info(
            "image_stored encoding=%s width=%d height=%d payload_length=%d",
            fallback.encoding.value,
            width,
            height,
            len(fallback.data),
        )
        return fallback
