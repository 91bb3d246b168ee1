from typing import Optional


class AgentError(Exception):
    """
    Base class for all application-specific exceptions.
    captures the original exception for debugging if needed.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


# --- Client Exceptions ---


class ValidationException(AgentError):
    """
    Raised when request input is missing or empty (prompt, task id).
    Maps to HTTP 400.
    """

    pass


# --- Upstream Exceptions (Provider Failures) ---


class GenerationError(AgentError):
    """
    Raised when an AI provider (Gemini/Tripo) fails or returns an
    unusable payload. Maps to HTTP 500, never retried.
    """

    pass


class ImageGenerationError(GenerationError):
    """Gemini returned an error or no inline image data."""

    pass


class UploadError(GenerationError):
    """Tripo rejected the image upload or returned no token."""

    pass


class TaskCreationError(GenerationError):
    pass


class TaskStatusError(GenerationError):
    pass


class DownloadError(GenerationError):
    """The finished model file could not be fetched."""

    pass


# --- Infrastructure Exceptions ---


class StorageError(AgentError):
    """
    Raised when reading or writing the local output files fails.
    """

    pass
