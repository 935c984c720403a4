"""
Exceptions raised by the transcription pipeline.
"""

import os
from typing import Optional


REMOTE_SERVICE_MARKER = "[remote-service]"


class NotFoundError(Exception):
    """Raised when an input file or directory does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class UnsupportedFormatError(Exception):
    """Raised when a file is rejected by the format policy."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason or "unsupported audio format"
        super().__init__(f"Cannot process '{os.path.basename(path)}': {self.reason}")


class ConversionError(Exception):
    """Raised when ffmpeg fails or produces no output."""

    def __init__(self, path: str, detail: str, cause: Optional[Exception] = None):
        self.path = path
        self.detail = detail
        self.cause = cause
        super().__init__(f"Failed to convert '{path}': {detail}")


class RemoteServiceError(Exception):
    """Raised when the transcription backend cannot serve a request.

    ``reason`` is one of ``network``, ``auth``, ``quota``, ``response``.
    The message always starts with :data:`REMOTE_SERVICE_MARKER`.
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        detail: str,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        self.operation = operation
        self.reason = reason
        self.detail = detail
        self.status_code = status_code
        self.cause = cause
        status = f" (HTTP {status_code})" if status_code else ""
        super().__init__(f"{REMOTE_SERVICE_MARKER} {operation} request failed [{reason}]{status}: {detail}")


class TranscriptWriteError(OSError):
    """Raised when a transcript artifact cannot be written."""

    def __init__(self, path: str, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write transcript '{path}': {cause}")


class PipelineStageError(Exception):
    """Wraps any failure of a pipeline stage.

    The message begins with the stage name so callers can map it to a
    single user-facing error; ``cause`` keeps the typed error.
    """

    def __init__(self, stage: str, file_path: str, cause: Exception):
        self.stage = stage
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"{stage} failed for '{os.path.basename(file_path)}': {cause}")
