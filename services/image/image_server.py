"""
Dynamic image server: stored meal payload -> PNG response body.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from app.exceptions import ImageDecodeError, PayloadMissing
from domain.enums import ImageEncoding
from domain.models import Meal
from services.image.codec import ImageDimensions, PixelCodecAdapter
from services.image.result import Result, attempt

logger = logging.getLogger("meallog.image.server")

PNG_MEDIA_TYPE = "image/png"


@dataclass(frozen=True)
class RenderedImage:
    content: bytes
    etag: str
    media_type: str = PNG_MEDIA_TYPE


def payload_etag(data: str) -> str:
    """Strong validator for a stored payload"""
    return '"' + hashlib.sha256(data.encode("ascii", "replace")).hexdigest()[:32] + '"'


class DynamicImageServer:
    """
    Lookup -> {NotFound | HasPayload}; HasPayload -> decode by tag.

    Tagged rows take exactly one path. Untagged legacy rows try the compact
    codec first and fall back to treating the payload as the original upload.
    """

    def __init__(
        self,
        codec: PixelCodecAdapter,
        default_size: Tuple[int, int] = (800, 600),
    ):
        self.codec = codec
        self.default_size = ImageDimensions(*default_size)

    def etag_for(self, meal: Optional[Meal]) -> str:
        self._require_payload(meal)
        return payload_etag(meal.image_data)

    def render(self, meal: Optional[Meal]) -> RenderedImage:
        """
        Raises:
            PayloadMissing: no meal, or the meal has no photo
            ImageDecodeError: payload undecodable in every applicable representation
        """
        self._require_payload(meal)

        width = meal.image_width or self.default_size.width
        height = meal.image_height or self.default_size.height

        if meal.image_encoding == ImageEncoding.QOI.value:
            result: Result[bytes] = self._decode_compact(meal, width, height)
        elif meal.image_encoding == ImageEncoding.RAW.value:
            result = self._decode_original(meal)
        else:
            result = self._decode_compact(meal, width, height).or_else(
                lambda error: self._fallback_to_original(meal, error)
            )

        try:
            content = result.unwrap()
        except ImageDecodeError:
            logger.error(
                "image_render_failed meal_id=%s encoding=%s", meal.id, meal.image_encoding
            )
            raise

        return RenderedImage(content=content, etag=payload_etag(meal.image_data))

    @staticmethod
    def _require_payload(meal: Optional[Meal]) -> None:
        if meal is None or not meal.image_data:
            raise PayloadMissing()

    def _decode_compact(self, meal: Meal, width: int, height: int) -> Result[bytes]:
        return attempt(
            self.codec.decode_to_png, meal.image_data, width, height, catch=ImageDecodeError
        )

    def _decode_original(self, meal: Meal) -> Result[bytes]:
        return attempt(self.codec.original_to_png, meal.image_data, catch=ImageDecodeError)

    def _fallback_to_original(self, meal: Meal, error: Exception) -> Result[bytes]:
        logger.info("QOI decoding failed for meal %s, trying base64 fallback: %s", meal.id, error)
        return self._decode_original(meal)
