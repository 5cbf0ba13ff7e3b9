"""
Pixel codec adapter.

Turns uploaded photos into QOI payloads for storage in the meal row and turns
stored payloads back into PNG for the browser. Pillow handles every container
format on the way in and PNG on the way out; the ``qoi`` package does the
pixel compression on a fixed RGBA buffer.
"""

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

import numpy as np
import qoi
from PIL import Image, UnidentifiedImageError

from app.exceptions import (
    ImageDecodeError,
    ImageEncodeError,
    UnknownDimensionsError,
)
from domain.enums import ImageEncoding

logger = logging.getLogger("meallog.image.codec")

DEFAULT_MAX_DIMENSION = 1920
CHANNELS = 4  # RGBA; QOI needs a declared channel count per encode

# Modes Pillow can write as PNG without conversion
_PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}
# Modes Image.reduce accepts
_REDUCIBLE_MODES = {"L", "LA", "RGB", "RGBA"}

PixelEncoder = Callable[[np.ndarray], bytes]
PixelDecoder = Callable[[bytes], np.ndarray]


class ImageDimensions(NamedTuple):
    width: int
    height: int


@dataclass(frozen=True)
class CompactEncoded:
    """QOI-compressed RGBA pixels, base64 text"""

    data: str
    width: int
    height: int
    encoding = ImageEncoding.QOI


@dataclass(frozen=True)
class RawFallback:
    """The original upload bytes, base64 text, stored untouched"""

    data: str
    width: int
    height: int
    encoding = ImageEncoding.RAW


def to_text(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii")


def from_text(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError("Stored image payload is not valid base64") from exc


def _open(image_bytes: bytes) -> Image.Image:
    try:
        return Image.open(io.BytesIO(image_bytes))
    except Image.DecompressionBombError as exc:
        logger.warning(f"image_rejected reason=decompression_bomb detail='{exc}'")
        raise UnknownDimensionsError(details={"reason": "decompression bomb"}) from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise UnknownDimensionsError(details={"reason": str(exc)}) from exc


def _shrink(image: Image.Image, width: int, height: int) -> Image.Image:
    """
    Cut a full-size image down close to the target box before any RGBA
    conversion, so the 4-bytes-a-pixel copy is made of the bounded image.
    Palette and bilevel images still convert at full size first.
    JPEG is decoded at a reduced scale, other formats are box-reduced by an
    integer factor. The result is still at least ``width`` x ``height``.
    """
    image.draft(image.mode, (width, height))
    factor = min(image.width // width, image.height // height)
    if factor < 2:
        return image
    if image.mode not in _REDUCIBLE_MODES:
        image = image.convert("RGBA")
    return image.reduce(factor)


def _to_png(image: Image.Image) -> bytes:
    if image.mode not in _PNG_MODES:
        image = image.convert("RGBA")
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class PixelCodecAdapter:
    """
    Wraps the QOI encoder/decoder behind photo-sized inputs and outputs.

    ``encoder``/``decoder`` default to ``qoi.encode``/``qoi.decode`` and can
    be swapped, e.g. for a failing encoder in tests.
    """

    def __init__(
        self,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
        encoder: Optional[PixelEncoder] = None,
        decoder: Optional[PixelDecoder] = None,
    ):
        self.max_dimension = max_dimension
        self._encoder = encoder or qoi.encode
        self._decoder = decoder or qoi.decode

    def read_dimensions(self, image_bytes: bytes) -> ImageDimensions:
        """
        Intrinsic width/height of an uploaded image.

        Raises:
            UnknownDimensionsError: bytes are not an image Pillow can identify
        """
        with _open(image_bytes) as image:
            width, height = image.size
        if not width or not height:
            raise UnknownDimensionsError()
        return ImageDimensions(width, height)

    def fit_within(self, width: int, height: int) -> ImageDimensions:
        """Scale proportionally so neither side exceeds ``max_dimension``"""
        if width <= self.max_dimension and height <= self.max_dimension:
            return ImageDimensions(width, height)
        ratio = min(self.max_dimension / width, self.max_dimension / height)
        return ImageDimensions(
            max(1, int(width * ratio + 0.5)),
            max(1, int(height * ratio + 0.5)),
        )

    def encode(self, image_bytes: bytes) -> CompactEncoded:
        """
        Convert an uploaded image into a base64 QOI payload.

        The image is shrunk to fit ``max_dimension`` first and only then
        flattened to an RGBA buffer for the encoder.

        Raises:
            UnknownDimensionsError: input is not an image
            ImageEncodeError: decoding the input or QOI encoding failed
        """
        width, height = self.fit_within(*self.read_dimensions(image_bytes))

        try:
            with _open(image_bytes) as image:
                rgba = _shrink(image, width, height).convert("RGBA")
            if rgba.size != (width, height):
                rgba = rgba.resize((width, height), Image.Resampling.LANCZOS)
            pixels = np.ascontiguousarray(np.asarray(rgba, dtype=np.uint8))
            if pixels.shape != (height, width, CHANNELS):
                raise ValueError(f"unexpected pixel buffer shape {pixels.shape}")
            blob = self._encoder(pixels)
        except UnknownDimensionsError:
            raise
        except Exception as exc:
            raise ImageEncodeError(details={"reason": str(exc)}) from exc

        if not blob:
            raise ImageEncodeError(details={"reason": "encoder returned no data"})

        payload = to_text(bytes(blob))
        logger.debug(
            "qoi_encoded width=%d height=%d payload_length=%d", width, height, len(payload)
        )
        return CompactEncoded(data=payload, width=width, height=height)

    def decode_to_png(self, data: str, width: int, height: int) -> bytes:
        """
        Decode a stored QOI payload into PNG bytes.

        ``width``/``height`` are the stored metadata. The QOI header is
        authoritative; a mismatch is logged.

        Raises:
            ImageDecodeError: payload is not valid QOI
        """
        blob = from_text(data)
        try:
            pixels = self._decoder(blob)
        except Exception as exc:
            raise ImageDecodeError("Failed to decode QOI data") from exc

        if pixels is None or getattr(pixels, "ndim", 0) != 3 or pixels.shape[2] not in (3, 4):
            raise ImageDecodeError("Failed to decode QOI data")

        decoded_height, decoded_width = pixels.shape[:2]
        if (decoded_width, decoded_height) != (width, height):
            logger.warning(
                "qoi_dimension_mismatch stored=%dx%d decoded=%dx%d",
                width,
                height,
                decoded_width,
                decoded_height,
            )

        try:
            return _to_png(Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)))
        except (ValueError, TypeError, OSError) as exc:
            raise ImageDecodeError("Failed to convert image for display") from exc

    def original_to_png(self, data: str) -> bytes:
        """
        Re-encode a stored original upload (base64) as PNG.

        Raises:
            ImageDecodeError: payload is not an image
        """
        blob = from_text(data)
        try:
            with _open(blob) as image:
                image.load()
                return _to_png(image)
        except UnknownDimensionsError as exc:
            raise ImageDecodeError("Stored payload is not an image") from exc
        except (ValueError, OSError) as exc:
            raise ImageDecodeError("Failed to convert image for display") from exc
