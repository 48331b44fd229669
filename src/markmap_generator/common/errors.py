"""Exception types shared by the proxy and the client."""
from __future__ import annotations

from markmap_generator.common.schema import DEFAULT_ERROR_MESSAGE, MAX_CHAR_LIMIT


class MarkmapError(Exception):
    """Base error carrying a user-facing message and an HTTP status."""
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingParametersError(MarkmapError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Missing required parameters")


class TextTooLongError(MarkmapError):
    status_code = 400

    def __init__(self, length: int, limit: int = MAX_CHAR_LIMIT, message: str | None = None) -> None:
        super().__init__(message or f"Input length {length} exceeds the maximum length {limit}")
        self.length = length
        self.limit = limit


class UnsupportedFormatError(MarkmapError):
    status_code = 415

    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported file format: {extension}")
        self.extension = extension


class FileTooLargeError(MarkmapError):
    status_code = 413

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File too large ({size} bytes), please upload a file smaller than {limit // (1024 * 1024)}MB"
        )
        self.size = size
        self.limit = limit


class ExtractionError(MarkmapError):
    """Raised when no text could be recovered from an uploaded document."""
    status_code = 422


class GenerationFailed(MarkmapError):
    """Raised client-side when the proxy reports an error."""
    status_code = 502

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or DEFAULT_ERROR_MESSAGE)


class SettingsError(MarkmapError):
    status_code = 400
