"""
Utility functions for the transcription pipeline.
"""

from typing import Dict, List
from urllib.parse import urlparse


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string (e.g., "1h 23m 45s")
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)


def format_file_size(size: int) -> str:
    """Format a byte count, e.g. ``26214400`` -> ``"25.0 MB"``."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def parse_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def validate_config(config: Dict) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not config.get('groq_token'):
        errors.append("GROQ_TOKEN is required")

    if not config.get('whisper_model'):
        errors.append("WHISPER_MODEL must not be empty")

    # Validate base URL format
    if 'groq_base_url' in config:
        parsed = urlparse(str(config['groq_base_url']))
        if not parsed.scheme or not parsed.netloc:
            errors.append("Invalid GROQ_BASE_URL format")

    # Validate timeout
    if 'request_timeout' in config:
        try:
            timeout = float(config['request_timeout'])
            if timeout <= 0:
                errors.append("REQUEST_TIMEOUT must be positive")
        except (ValueError, TypeError):
            errors.append("Invalid REQUEST_TIMEOUT value")

    # Validate max file size
    if 'max_file_size' in config:
        try:
            max_size = int(config['max_file_size'])
            if max_size <= 0:
                errors.append("MAX_FILE_SIZE must be positive")
        except (ValueError, TypeError):
            errors.append("Invalid MAX_FILE_SIZE value")

    if 'allowed_formats' in config and not config['allowed_formats']:
        errors.append("ALLOWED_AUDIO_FORMATS must list at least one format")

    return errors
