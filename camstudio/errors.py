"""Typed failures surfaced by the camera and generation layers."""

from __future__ import annotations


class CamStudioError(Exception):
    user_message = "Something went wrong"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CameraValidationError(CamStudioError):
    """Malformed input parameter, e.g. a preset key that is not in its table."""

    user_message = "Check your input"


class ServiceError(CamStudioError):
    """Non-2xx response or network failure from the generation endpoint."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class TransientServiceError(ServiceError):
    user_message = "The service is busy, try again later"


class FatalServiceError(ServiceError):
    user_message = "The generation service rejected the request"


class RequestTimeoutError(CamStudioError):
    user_message = "The request timed out, try again later"

    def __init__(self, message: str = "Request timed out, please try again later"):
        super().__init__(message)


class ImageDecodeError(CamStudioError):
    user_message = "The generated image could not be read"


class NormalizationError(CamStudioError):
    user_message = "Generation produced no usable output"
