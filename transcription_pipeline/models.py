"""
Data models for the transcription pipeline.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class ResponseFormat(Enum):
    """Response shapes offered by the transcription service."""
    TEXT = "text"
    JSON = "json"
    VERBOSE_JSON = "verbose_json"

    @property
    def supports_segments(self) -> bool:
        return self is ResponseFormat.VERBOSE_JSON


class TimestampGranularity(Enum):
    """Level of temporal detail in a verbose response."""
    SEGMENT = "segment"
    WORD = "word"


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ConversionProfile:
    """Target ffmpeg profile for normalized audio."""
    container: str = "mp4"
    audio_codec: str = "aac"
    sample_rate: int = 16000
    channels: int = 1
    audio_bitrate: str = "128k"
    synthetic_video: bool = False
    video_codec: str = "libx264"
    video_source: str = "color=c=black:s=320x240:r=1"


@dataclass
class ConversionResult:
    """Outcome of normalizing one audio file."""
    success: bool
    original_path: str
    processed_path: Optional[str]
    was_converted: bool
    original_format: Optional[str] = None
    target_format: Optional[str] = None
    error: Optional[str] = None
    # false when the derived path already existed before conversion
    created_output: bool = False

    def conversion_info(self) -> Optional[Dict[str, str]]:
        if not self.was_converted:
            return None
        return {
            "original_format": self.original_format,
            "target_format": self.target_format,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation."""
        return {
            "success": self.success,
            "original_path": self.original_path,
            "processed_path": self.processed_path,
            "was_converted": self.was_converted,
            "original_format": self.original_format,
            "target_format": self.target_format,
            "error": self.error,
            "created_output": self.created_output,
        }


@dataclass(frozen=True)
class TranscriptionOptions:
    """Caller options for a transcription or translation request."""
    language: Optional[str] = None
    prompt: Optional[str] = None
    response_format: ResponseFormat = ResponseFormat.VERBOSE_JSON
    timestamp_granularities: Tuple[TimestampGranularity, ...] = (TimestampGranularity.SEGMENT,)
    temperature: float = 0.0

    def __post_init__(self):
        if self.temperature < 0:
            raise ValueError(f"temperature must be >= 0, got {self.temperature}")

    @classmethod
    def for_transcription(cls, **kwargs) -> "TranscriptionOptions":
        return cls(**kwargs)

    @classmethod
    def for_translation(cls, **kwargs) -> "TranscriptionOptions":
        kwargs.setdefault("response_format", ResponseFormat.JSON)
        kwargs.setdefault("timestamp_granularities", ())
        return cls(**kwargs)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        defaults: Optional["TranscriptionOptions"] = None,
    ) -> "TranscriptionOptions":
        """
        Build options from loosely typed input (CLI flags, JSON bodies).

        Args:
            data: Mapping with any of ``language``, ``prompt``,
                ``response_format``, ``timestamp_granularities``, ``temperature``
            defaults: Options supplying values absent from ``data``

        Returns:
            TranscriptionOptions instance

        Raises:
            ValueError: On unknown formats or granularities, or a bad temperature
        """
        defaults = defaults or cls()

        response_format = data.get("response_format") or defaults.response_format
        if not isinstance(response_format, ResponseFormat):
            try:
                response_format = ResponseFormat(str(response_format).strip())
            except ValueError:
                allowed = ", ".join(f.value for f in ResponseFormat)
                raise ValueError(f"Unknown response format '{response_format}' (allowed: {allowed})")

        granularities = data.get("timestamp_granularities")
        if granularities is None:
            granularities = defaults.timestamp_granularities
        if isinstance(granularities, str):
            granularities = [g.strip() for g in granularities.split(",") if g.strip()]
        parsed = []
        for value in granularities:
            if isinstance(value, TimestampGranularity):
                parsed.append(value)
                continue
            try:
                parsed.append(TimestampGranularity(value))
            except ValueError:
                raise ValueError(f"Unknown timestamp granularity '{value}'")

        temperature = data.get("temperature")
        if temperature is None or temperature == "":
            temperature = defaults.temperature
        try:
            temperature = float(temperature)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid temperature value '{temperature}'")

        return cls(
            language=data.get("language") or defaults.language,
            prompt=data.get("prompt") or defaults.prompt,
            response_format=response_format,
            timestamp_granularities=tuple(dict.fromkeys(parsed)),
            temperature=temperature,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "prompt": self.prompt,
            "response_format": self.response_format.value,
            "timestamp_granularities": [g.value for g in self.timestamp_granularities],
            "temperature": self.temperature,
        }


@dataclass
class TranscriptionMetadata:
    """
    Provenance attached to every transcription result.

    ``processed_file_path`` names the file that was actually uploaded. When
    the pipeline deletes a converted intermediate after the remote call,
    ``processed_file_removed`` is set and that path no longer exists.
    """
    file_name: str
    original_file_path: str
    processed_file_path: str
    was_converted: bool
    model: str
    operation: str = "transcribe"
    conversion_info: Optional[Dict[str, str]] = None
    language: Optional[str] = None
    target_language: Optional[str] = None
    processed_file_removed: bool = False
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def resolved_language(self) -> str:
        return self.language or self.target_language or "auto-detect"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "file_name": self.file_name,
            "original_file_path": self.original_file_path,
            "processed_file_path": self.processed_file_path,
            "processed_file_removed": self.processed_file_removed,
            "was_converted": self.was_converted,
            "conversion_info": self.conversion_info,
            "model": self.model,
            "operation": self.operation,
            "timestamp": self.timestamp,
        }
        if self.operation == "translate":
            data["target_language"] = self.target_language
        else:
            data["language"] = self.language or "auto-detect"
        return data


@dataclass
class TranscriptionResult:
    """Successful transcription or translation of one file."""
    payload: Union[str, Dict[str, Any]]
    metadata: TranscriptionMetadata
    saved_path: Optional[str] = None
    success: bool = True

    @property
    def text(self) -> str:
        """Body text of the payload, whatever its shape."""
        if isinstance(self.payload, str):
            return self.payload
        if isinstance(self.payload, dict) and self.payload.get("text"):
            return self.payload["text"]
        return json.dumps(self.payload, indent=2, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation."""
        data = {
            "success": self.success,
            "payload": self.payload,
            "metadata": self.metadata.to_dict(),
        }
        if self.saved_path:
            data["saved_path"] = self.saved_path
        return data


@dataclass
class BatchFailure:
    """Failure record for one file of a batch."""
    error: str
    file_name: str
    file_path: str
    timestamp: str = field(default_factory=utc_timestamp)
    success: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "metadata": {
                "file_name": self.file_name,
                "file_path": self.file_path,
                "timestamp": self.timestamp,
            },
        }


BatchEntry = Union[TranscriptionResult, BatchFailure]


@dataclass
class BatchReport:
    """Ordered outcomes of a directory batch."""
    results: List[BatchEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def summary(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary(),
        }


@dataclass
class FileInfo:
    """Read-only description of a file on disk."""
    name: str
    size: int
    extension: str
    last_modified: datetime
    is_valid_audio: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "extension": self.extension,
            "last_modified": self.last_modified.isoformat(),
            "is_valid_audio": self.is_valid_audio,
        }


@dataclass
class AudioStreamInfo:
    codec: Optional[str]
    sample_rate: int
    channels: int
    bitrate: int


@dataclass
class AudioInfo:
    """Container and stream details reported by ffprobe."""
    duration: float
    format: Optional[str]
    size: int
    bitrate: int
    audio: Optional[AudioStreamInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duration": self.duration,
            "format": self.format,
            "size": self.size,
            "bitrate": self.bitrate,
            "audio": vars(self.audio) if self.audio else None,
        }


@dataclass
class TranscriptInfo:
    """A transcript artifact found in an output directory."""
    name: str
    size: int
    last_modified: datetime
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "last_modified": self.last_modified.isoformat(),
            "path": self.path,
        }
