"""
Exception types shared across services.
"""
from typing import Optional


class InvalidInputError(ValueError):
    """Raised when input violates a structural assumption (ordering, ranges)."""
    pass


class AIProviderError(Exception):
    """Custom exception for AI provider errors."""
    pass


class TranscriptionServiceError(Exception):
    """Custom exception for transcription service errors."""
    pass


class MomentServiceError(Exception):
    """Custom exception for moment analysis errors."""
    pass


class RenderError(Exception):
    """Raised when ffmpeg or ffprobe exits with a non-zero status."""

    def __init__(self, message: str, exit_code: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class PipelineError(Exception):
    """Raised when a pipeline stage fails hard."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step} failed: {message}")
        self.step = step
