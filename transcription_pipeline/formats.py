"""
Format policy: which files are audio we accept and which need normalizing.

Everything here is a pure function of the path string; no file is touched.
"""

import os
from typing import Iterable, Optional

from .exceptions import UnsupportedFormatError

SUPPORTED_EXTENSIONS = ("mp3", "wav", "m4a", "flac", "ogg", "opus", "webm", "mp4", "mpeg", "mpga")
LEGACY_EXTENSIONS = ("opus",)
TARGET_EXTENSION = "mp4"


def normalize_extension(extension: str) -> str:
    """Lowercase an extension and strip its leading dot."""
    return extension.strip().lower().lstrip(".")


class FormatPolicy:
    """Decides whether a file is supported and whether it needs conversion."""

    def __init__(
        self,
        supported_extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
        legacy_extensions: Iterable[str] = LEGACY_EXTENSIONS,
        target_extension: str = TARGET_EXTENSION,
    ):
        self.supported_extensions = frozenset(normalize_extension(e) for e in supported_extensions)
        self.legacy_extensions = frozenset(normalize_extension(e) for e in legacy_extensions)
        self.target_extension = normalize_extension(target_extension)

    @staticmethod
    def extension_of(path: str) -> str:
        return normalize_extension(os.path.splitext(path)[1])

    def needs_conversion(self, path: str) -> bool:
        extension = self.extension_of(path)
        return bool(extension) and extension in self.legacy_extensions

    def is_supported(self, path: str) -> bool:
        extension = self.extension_of(path)
        return bool(extension) and extension in self.supported_extensions

    def derived_output_path(self, path: str) -> str:
        """Path of the normalized file: same directory and base name, target extension."""
        root, _ = os.path.splitext(path)
        return f"{root}.{self.target_extension}"

    def check(self, path: str, reason: Optional[str] = None) -> None:
        """
        Reject files outside the allow-list.

        Raises:
            UnsupportedFormatError: If the extension is not supported
        """
        if not self.is_supported(path):
            allowed = ", ".join(sorted(self.supported_extensions))
            raise UnsupportedFormatError(path, reason or f"unsupported audio format (allowed: {allowed})")


DEFAULT_POLICY = FormatPolicy()


def is_supported_audio_file(path: str) -> bool:
    return DEFAULT_POLICY.is_supported(path)
