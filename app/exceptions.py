from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Internal server error"
    default_code: Optional[str] = None

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(AppError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "SERVICE_VALIDATION_ERROR"


class NotFoundError(AppError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    """Raised when a resource conflict occurs (e.g., duplicate person name)."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


# ---------------------------------------------------------------------------
# Upload rejections
# ---------------------------------------------------------------------------


class UnsupportedMediaType(ServiceValidationError):
    """Raised when an upload is not an image (by MIME type or by content)."""

    http_status = 415
    default_message = "Only image files are allowed"
    default_code = "UNSUPPORTED_MEDIA_TYPE"


class PayloadTooLarge(ServiceValidationError):
    """Raised when an upload exceeds the configured size limit."""

    http_status = 413
    default_message = "Uploaded file is too large"
    default_code = "PAYLOAD_TOO_LARGE"


class PayloadMissing(NotFoundError):
    """Raised when a meal has no stored image payload."""

    default_message = "Image not found"
    default_code = "IMAGE_NOT_FOUND"


# ---------------------------------------------------------------------------
# Image pipeline
# ---------------------------------------------------------------------------


class ImageProcessingError(AppError):
    """Base class for codec failures."""

    default_message = "Failed to process image"
    default_code = "IMAGE_PROCESSING_ERROR"


class UnknownDimensionsError(ImageProcessingError):
    """Input bytes are not a decodable image; width/height cannot be read."""

    default_message = "Could not determine image dimensions"
    default_code = "UNKNOWN_DIMENSIONS"


class ImageEncodeError(ImageProcessingError):
    """The compact codec rejected the raw pixel buffer."""

    default_message = "Failed to process image for storage"
    default_code = "IMAGE_ENCODE_ERROR"


class ImageDecodeError(ImageProcessingError):
    """A stored payload could not be turned back into a displayable image."""

    default_message = "Failed to serve image"
    default_code = "IMAGE_DECODE_ERROR"
