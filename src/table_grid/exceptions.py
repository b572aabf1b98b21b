"""
Custom exceptions for table grid extraction.

Provides a hierarchy of exceptions for the errors that can occur while
decoding images, detecting the table grid and recognizing cell text.
"""

from typing import Optional, Any


class TableGridError(Exception):
    """Base exception for all table grid errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(TableGridError):
    """Raised when there are configuration-related errors."""
    pass


class ValidationError(TableGridError):
    """Raised when input validation fails."""
    pass


class ProcessingError(TableGridError):
    """Raised when image processing operations fail."""

    def __init__(self, message: str, processor: Optional[str] = None,
                 image_path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if processor:
            details["processor"] = processor
        if image_path:
            details["image_path"] = image_path
        super().__init__(message, details)


class ImageLoadError(ProcessingError):
    """Raised when an image cannot be loaded or decoded."""
    pass


class ImageSaveError(ProcessingError):
    """Raised when an image cannot be saved."""
    pass


class LineDetectionError(ProcessingError):
    """Raised when grid line detection receives unusable input."""
    pass


class DegenerateGridError(ProcessingError):
    """Raised when the detected grid cannot produce usable cells."""
    pass


class RecognitionError(TableGridError):
    """Raised when text recognition of a cell fails."""

    def __init__(self, message: str, row: Optional[int] = None,
                 column: Optional[int] = None, **kwargs: Any) -> None:
        details = kwargs
        if row is not None:
            details["row"] = row
        if column is not None:
            details["column"] = column
        super().__init__(message, details)


class RecognizerInitError(RecognitionError):
    """Raised when the recognition engine cannot be initialized."""
    pass
