"""
Transcription pipeline: normalize, submit, and describe one audio file.
"""

import logging
import os
from datetime import datetime
from typing import Optional

from .backends import GroqBackend
from .batch import BatchRunner
from .client import TRANSLATION_TARGET_LANGUAGE, TranscriptionClient
from .config import PipelineConfig
from .converter import Converter, FFmpegConverter
from .exceptions import ConversionError, NotFoundError, PipelineStageError, UnsupportedFormatError
from .formats import DEFAULT_POLICY, FormatPolicy
from .models import (
    BatchReport,
    FileInfo,
    TranscriptionMetadata,
    TranscriptionOptions,
    TranscriptionResult,
)
from .utils import format_file_size
from .writer import TranscriptWriter

logger = logging.getLogger(__name__)


def get_file_info(file_path: str, policy: FormatPolicy = DEFAULT_POLICY) -> FileInfo:
    """
    Describe a file without running the pipeline.

    Raises:
        NotFoundError: If the file does not exist
    """
    try:
        stats = os.stat(file_path)
    except FileNotFoundError as e:
        raise NotFoundError(file_path) from e

    return FileInfo(
        name=os.path.basename(file_path),
        size=stats.st_size,
        extension=os.path.splitext(file_path)[1],
        last_modified=datetime.fromtimestamp(stats.st_mtime),
        is_valid_audio=policy.is_supported(file_path),
    )


class TranscriptionPipeline:
    """Composes format policy, converter and client into file-level operations."""

    def __init__(
        self,
        client: TranscriptionClient,
        converter: Converter,
        policy: Optional[FormatPolicy] = None,
        writer: Optional[TranscriptWriter] = None,
        cleanup_converted: bool = False,
    ):
        """
        Initialize the pipeline.

        Args:
            client: Adapter for the remote transcription service
            converter: Normalizes legacy-format files
            policy: Format policy (defaults to the converter's)
            writer: Transcript writer used for saved results
            cleanup_converted: Remove converted intermediates after the remote call
        """
        self.client = client
        self.converter = converter
        self.policy = policy or converter.policy
        self.writer = writer or TranscriptWriter()
        self.cleanup_converted = cleanup_converted

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "TranscriptionPipeline":
        """Wire the Groq backend and ffmpeg converter from configuration."""
        policy = FormatPolicy(supported_extensions=config.allowed_formats)
        backend = GroqBackend(
            api_key=config.groq_token,
            base_url=config.groq_base_url,
            timeout=config.request_timeout,
        )
        converter = FFmpegConverter(
            policy=policy,
            ffmpeg_binary=config.ffmpeg_binary,
            ffprobe_binary=config.ffprobe_binary,
        )
        return cls(
            client=TranscriptionClient(backend, model=config.whisper_model),
            converter=converter,
            policy=policy,
            cleanup_converted=config.cleanup_converted,
        )

    def transcribe_file(
        self,
        file_path: str,
        options: Optional[TranscriptionOptions] = None,
    ) -> TranscriptionResult:
        """
        Transcribe one audio file, converting it first if needed.

        Args:
            file_path: Path to the audio file
            options: Transcription options (verbose JSON with segments by default)

        Returns:
            TranscriptionResult with provenance metadata

        Raises:
            PipelineStageError: Message starts with ``transcribe``; ``cause``
                holds the typed error
        """
        return self._run('transcribe', file_path, options or TranscriptionOptions.for_transcription())

    def translate_file(
        self,
        file_path: str,
        options: Optional[TranscriptionOptions] = None,
    ) -> TranscriptionResult:
        """
        Translate one audio file into English text.

        Raises:
            PipelineStageError: Message starts with ``translate``
        """
        return self._run('translate', file_path, options or TranscriptionOptions.for_translation())

    def _run(self, stage: str, file_path: str, options: TranscriptionOptions) -> TranscriptionResult:
        try:
            self.policy.check(file_path)
            if not os.path.isfile(file_path):
                raise NotFoundError(file_path)

            conversion = self.converter.process_audio_file(file_path)
            if not conversion.success:
                raise ConversionError(file_path, conversion.error or "unknown conversion failure")

            if conversion.was_converted:
                logger.info(f"Converted {conversion.original_format} to {conversion.target_format}")

            try:
                if stage == 'translate':
                    payload, model = self.client.translate(conversion.processed_path, options)
                else:
                    payload, model = self.client.transcribe(conversion.processed_path, options)
            finally:
                removed = False
                if self.cleanup_converted and conversion.was_converted and conversion.created_output:
                    removed = self._remove_intermediate(conversion.processed_path, file_path)

        except Exception as e:
            logger.error(f"{stage} failed for {file_path}: {e}")
            raise PipelineStageError(stage, file_path, e) from e

        metadata = TranscriptionMetadata(
            file_name=os.path.basename(file_path),
            original_file_path=file_path,
            processed_file_path=conversion.processed_path,
            was_converted=conversion.was_converted,
            conversion_info=conversion.conversion_info(),
            model=model,
            operation=stage,
            processed_file_removed=removed,
        )
        if stage == 'translate':
            metadata.target_language = TRANSLATION_TARGET_LANGUAGE
        else:
            metadata.language = options.language

        return TranscriptionResult(payload=payload, metadata=metadata)

    @staticmethod
    def _remove_intermediate(processed_path: str, original_path: str) -> bool:
        if os.path.abspath(processed_path) == os.path.abspath(original_path):
            return False
        try:
            os.remove(processed_path)
            logger.debug(f"Removed intermediate file {processed_path}")
            return True
        except OSError as e:
            logger.warning(f"Could not remove intermediate file {processed_path}: {e}")
            return False

    def process_audio_directory(
        self,
        audio_dir: str,
        options: Optional[TranscriptionOptions] = None,
        output_dir: Optional[str] = None,
        max_workers: int = 1,
        show_progress: bool = False,
    ) -> BatchReport:
        """Transcribe every supported file in a directory; see :class:`BatchRunner`."""
        runner = BatchRunner(self)
        return runner.process_directory(
            audio_dir,
            options,
            output_dir=output_dir,
            max_workers=max_workers,
            show_progress=show_progress,
        )

    def save_transcription(self, result: TranscriptionResult, output_dir: str) -> str:
        saved_path = self.writer.save(result, output_dir)
        result.saved_path = saved_path
        return saved_path

    def is_supported_audio_file(self, file_path: str) -> bool:
        return self.policy.is_supported(file_path)

    def get_file_info(self, file_path: str) -> FileInfo:
        return get_file_info(file_path, self.policy)

    def check_upload(self, file_path: str, max_file_size: int) -> None:
        """
        Validate a caller-supplied file before processing it.

        Raises:
            UnsupportedFormatError: If the extension is not allowed or the file is too large
            NotFoundError: If the file does not exist
        """
        self.policy.check(file_path)
        size = self.get_file_info(file_path).size
        if size > max_file_size:
            raise UnsupportedFormatError(
                file_path,
                f"file is {format_file_size(size)}, maximum is {format_file_size(max_file_size)}",
            )
