"""
Transcription Pipeline Package

Normalizes audio files, submits them to a Groq Whisper endpoint for
transcription or translation, and stores the resulting transcripts.
"""

__version__ = "0.3.0"

from .backends import GroqBackend, TranscriptionBackend
from .batch import BatchRunner
from .client import TranscriptionClient
from .config import PipelineConfig
from .converter import Converter, FFmpegConverter
from .exceptions import (
    ConversionError,
    NotFoundError,
    PipelineStageError,
    RemoteServiceError,
    TranscriptWriteError,
    UnsupportedFormatError,
)
from .formats import FormatPolicy, is_supported_audio_file
from .models import (
    BatchFailure,
    BatchReport,
    ConversionProfile,
    ConversionResult,
    ResponseFormat,
    TimestampGranularity,
    TranscriptionOptions,
    TranscriptionResult,
)
from .pipeline import TranscriptionPipeline
from .writer import TranscriptWriter

__all__ = [
    "BatchFailure",
    "BatchReport",
    "BatchRunner",
    "ConversionError",
    "ConversionProfile",
    "ConversionResult",
    "Converter",
    "FFmpegConverter",
    "FormatPolicy",
    "GroqBackend",
    "NotFoundError",
    "PipelineConfig",
    "PipelineStageError",
    "RemoteServiceError",
    "ResponseFormat",
    "TimestampGranularity",
    "TranscriptWriteError",
    "TranscriptWriter",
    "TranscriptionBackend",
    "TranscriptionClient",
    "TranscriptionOptions",
    "TranscriptionPipeline",
    "TranscriptionResult",
    "UnsupportedFormatError",
    "is_supported_audio_file",
]
