"""
Configuration loaded from environment variables.
"""

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .backends import DEFAULT_BASE_URL
from .client import DEFAULT_MODEL
from .formats import SUPPORTED_EXTENSIONS, normalize_extension
from .utils import parse_bool, validate_config

DEFAULT_MAX_FILE_SIZE = 25 * 1024 * 1024


@dataclass(frozen=True)
class PipelineConfig:
    """Settings fixed for the lifetime of a pipeline."""
    groq_token: str = ""
    groq_base_url: str = DEFAULT_BASE_URL
    whisper_model: str = DEFAULT_MODEL
    request_timeout: float = 120.0
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_formats: Tuple[str, ...] = SUPPORTED_EXTENSIONS
    audio_dir: str = "audios"
    texts_dir: str = "texts"
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    cleanup_converted: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """
        Build configuration from environment variables.

        Values that cannot be parsed are kept as given so that
        :meth:`validate` reports them.
        """
        env = os.environ if environ is None else environ

        formats = env.get('ALLOWED_AUDIO_FORMATS')
        allowed = (
            tuple(normalize_extension(f) for f in formats.split(',') if f.strip())
            if formats else SUPPORTED_EXTENSIONS
        )

        return cls(
            groq_token=env.get('GROQ_TOKEN', ''),
            groq_base_url=env.get('GROQ_BASE_URL', DEFAULT_BASE_URL),
            whisper_model=env.get('WHISPER_MODEL', DEFAULT_MODEL),
            request_timeout=_number(env.get('REQUEST_TIMEOUT'), float, 120.0),
            max_file_size=_number(env.get('MAX_FILE_SIZE'), int, DEFAULT_MAX_FILE_SIZE),
            allowed_formats=allowed,
            audio_dir=env.get('AUDIO_DIR', 'audios'),
            texts_dir=env.get('TEXTS_DIR', 'texts'),
            ffmpeg_binary=env.get('FFMPEG_BINARY', 'ffmpeg'),
            ffprobe_binary=env.get('FFPROBE_BINARY', 'ffprobe'),
            cleanup_converted=parse_bool(env.get('CLEANUP_CONVERTED', 'false')),
        )

    def validate(self) -> List[str]:
        return validate_config(asdict(self))

    def to_public_dict(self) -> Dict[str, Any]:
        """Configuration without secrets, suitable for display."""
        data = asdict(self)
        data.pop('groq_token')
        data['has_token'] = bool(self.groq_token)
        data['allowed_formats'] = list(self.allowed_formats)
        return data


def _number(value, cast, default):
    if value is None or value == '':
        return default
    try:
        return cast(value)
    except ValueError:
        return value
