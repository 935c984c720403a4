"""
Persists transcripts as plain text files with a provenance header.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List

from .exceptions import NotFoundError, TranscriptWriteError, UnsupportedFormatError
from .models import TranscriptInfo, TranscriptionResult

logger = logging.getLogger(__name__)

TRANSCRIPT_EXTENSION = ".txt"


class TranscriptWriter:
    """Writes one ``<base name>.txt`` artifact per transcribed file."""

    @staticmethod
    def artifact_name(file_name: str) -> str:
        return Path(file_name).stem + TRANSCRIPT_EXTENSION

    @staticmethod
    def render(result: TranscriptionResult) -> str:
        metadata = result.metadata
        header = "\n".join([
            "# Automatically generated transcription",
            f"# File: {metadata.file_name}",
            f"# Model: {metadata.model}",
            f"# Date: {metadata.timestamp}",
            f"# Language: {metadata.resolved_language}",
        ])
        return f"{header}\n\n{result.text}\n"

    def save(self, result: TranscriptionResult, output_dir: str) -> str:
        """
        Save a transcription result, replacing any previous artifact.

        Args:
            result: Successful transcription or translation
            output_dir: Directory for the artifact (created if missing)

        Returns:
            Path of the written file

        Raises:
            TranscriptWriteError: If the filesystem refuses the write
        """
        output_path = os.path.join(output_dir, self.artifact_name(result.metadata.file_name))

        try:
            Path(output_dir).mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self.render(result))
        except OSError as e:
            logger.error(f"Failed to save transcription to {output_path}: {e}")
            raise TranscriptWriteError(output_path, e) from e

        logger.info(f"Saved transcription to {output_path}")
        return output_path

    def list_transcriptions(self, output_dir: str) -> List[TranscriptInfo]:
        """List transcript artifacts in a directory, sorted by name."""
        if not os.path.isdir(output_dir):
            raise NotFoundError(output_dir)

        transcripts = []
        for entry in sorted(os.listdir(output_dir)):
            path = os.path.join(output_dir, entry)
            if not entry.endswith(TRANSCRIPT_EXTENSION) or not os.path.isfile(path):
                continue
            stats = os.stat(path)
            transcripts.append(TranscriptInfo(
                name=entry,
                size=stats.st_size,
                last_modified=datetime.fromtimestamp(stats.st_mtime),
                path=path,
            ))
        return transcripts

    def read_transcription(self, output_dir: str, name: str) -> str:
        """
        Read one transcript artifact.

        Raises:
            UnsupportedFormatError: If ``name`` is not a plain ``.txt`` file name
            NotFoundError: If the artifact does not exist
        """
        if not name.endswith(TRANSCRIPT_EXTENSION) or os.path.basename(name) != name:
            raise UnsupportedFormatError(name, "only .txt transcripts can be read")

        path = os.path.join(output_dir, name)
        if not os.path.isfile(path):
            raise NotFoundError(path)

        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
