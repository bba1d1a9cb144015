# gopherize/errors.py
"""Exceptions raised by the gopherize pipeline and its collaborators."""

from typing import Optional


class GopherizeError(Exception):
    """Base exception for request-level failures.

    ``stage`` is filled in by the pipeline with the state it was in when the
    error was raised.
    """

    stage: Optional[str] = None


class DecodeError(GopherizeError):
    """Raised when input bytes are not a readable image."""


class UnsupportedFormat(DecodeError):
    """Raised when an image decodes but is neither PNG nor JPEG."""


class EncodeError(GopherizeError):
    """Raised when the composited canvas cannot be encoded."""


class InvalidFormat(EncodeError):
    """Raised when asked to encode into a format other than png or jpeg."""


class DetectionServiceError(GopherizeError):
    """Raised when the face detection call fails."""


class ServiceUnavailable(DetectionServiceError):
    """The detection service could not be reached or timed out."""


class ServiceError(DetectionServiceError):
    """The detection service answered with an error or unusable data."""


class LandmarkNotFound(GopherizeError, KeyError):
    """A face does not carry the requested landmark."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"landmark not found: {self.name}"


class AssetLoadError(GopherizeError):
    """An overlay sprite is missing or unreadable."""


class ImageFetchError(GopherizeError):
    """The remote image behind a URL could not be downloaded."""


class ImageFetchUnavailable(ImageFetchError):
    """The remote image host timed out or could not be reached."""


class ConfigurationError(GopherizeError):
    """Required configuration (such as the API key) is missing."""
