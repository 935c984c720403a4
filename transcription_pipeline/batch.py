"""
Directory batch transcription with per-file failure isolation.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, List, Optional

from tqdm import tqdm

from .exceptions import NotFoundError
from .models import BatchEntry, BatchFailure, BatchReport, TranscriptionOptions

if TYPE_CHECKING:
    from .pipeline import TranscriptionPipeline

logger = logging.getLogger(__name__)


class BatchRunner:
    """Runs the pipeline over every supported audio file of a directory."""

    def __init__(self, pipeline: "TranscriptionPipeline"):
        self.pipeline = pipeline

    def list_audio_files(self, audio_dir: str) -> List[str]:
        """
        List supported audio files in listing (name) order.

        Directories and non-audio files are skipped.

        Raises:
            NotFoundError: If ``audio_dir`` is not a directory
        """
        if not os.path.isdir(audio_dir):
            raise NotFoundError(audio_dir)

        files = []
        for entry in sorted(os.listdir(audio_dir)):
            path = os.path.join(audio_dir, entry)
            if os.path.isfile(path) and self.pipeline.is_supported_audio_file(entry):
                files.append(path)
        return files

    def process_directory(
        self,
        audio_dir: str,
        options: Optional[TranscriptionOptions] = None,
        output_dir: Optional[str] = None,
        max_workers: int = 1,
        show_progress: bool = False,
    ) -> BatchReport:
        """
        Transcribe all audio files in a directory.

        Args:
            audio_dir: Directory to scan
            options: Transcription options applied to every file
            output_dir: If set, each success is saved here before moving on
            max_workers: Files processed concurrently (1 = sequential)
            show_progress: Display a progress bar

        Returns:
            BatchReport ordered like the directory listing
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        files = self.list_audio_files(audio_dir)
        logger.info(f"Found {len(files)} audio files in {audio_dir}")

        if max_workers == 1:
            results = [
                self._process_file(path, options, output_dir)
                for path in tqdm(files, desc="Transcribing", disable=not show_progress)
            ]
        else:
            results = [None] * len(files)
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {
                    executor.submit(self._process_file, path, options, output_dir): index
                    for index, path in enumerate(files)
                }
                progress = tqdm(as_completed(futures), total=len(files),
                                desc="Transcribing", disable=not show_progress)
                for future in progress:
                    results[futures[future]] = future.result()

        report = BatchReport(results=results)
        logger.info(f"Batch complete: {report.successful} successful, {report.failed} failed")
        return report

    def _process_file(
        self,
        file_path: str,
        options: Optional[TranscriptionOptions],
        output_dir: Optional[str],
    ) -> BatchEntry:
        try:
            result = self.pipeline.transcribe_file(file_path, options)
            if output_dir:
                self.pipeline.save_transcription(result, output_dir)
            return result
        except Exception as e:
            logger.error(f"Failed to process {file_path}: {e}")
            return BatchFailure(
                error=str(e),
                file_name=os.path.basename(file_path),
                file_path=file_path,
            )
