"""
Audio normalization through ffmpeg.
"""

import json
import logging
import os
import subprocess
import tempfile
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .exceptions import ConversionError
from .formats import DEFAULT_POLICY, FormatPolicy
from .models import AudioInfo, AudioStreamInfo, ConversionProfile, ConversionResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

# tail of ffmpeg stderr kept in ConversionError messages
MAX_DIAGNOSTIC_CHARS = 2000


class Converter(ABC):
    """Capability that turns a legacy-format file into an accepted one."""

    def __init__(self, policy: FormatPolicy = DEFAULT_POLICY):
        self.policy = policy

    @abstractmethod
    def convert(self, input_path: str) -> str:
        """
        Convert a file that needs normalization.

        Args:
            input_path: Existing file whose extension the policy marks as legacy

        Returns:
            Path of the converted file

        Raises:
            ConversionError: If the conversion fails or produces no output
        """

    def needs_conversion(self, file_path: str) -> bool:
        return self.policy.needs_conversion(file_path)

    def process_audio_file(self, file_path: str) -> ConversionResult:
        """
        Convert the file if the policy requires it, otherwise pass it through.

        Never raises; failures are reported through ``success``/``error``.
        """
        name = os.path.basename(file_path)

        if not self.needs_conversion(file_path):
            logger.info(f"{name} is already compatible")
            return ConversionResult(
                success=True,
                original_path=file_path,
                processed_path=file_path,
                was_converted=False,
            )

        original_format = self.policy.extension_of(file_path)
        logger.info(f"{name} needs conversion from {original_format} to {self.policy.target_extension}")

        derived_path = self.policy.derived_output_path(file_path)
        preexisting = os.path.exists(derived_path)
        if preexisting:
            logger.warning(f"{os.path.basename(derived_path)} already exists and will be overwritten")

        try:
            converted_path = self.convert(file_path)
        except Exception as e:
            logger.error(f"Conversion of {name} failed: {e}")
            return ConversionResult(
                success=False,
                original_path=file_path,
                processed_path=None,
                was_converted=False,
                original_format=original_format,
                target_format=self.policy.target_extension,
                error=str(e),
            )

        return ConversionResult(
            success=True,
            original_path=file_path,
            processed_path=converted_path,
            was_converted=True,
            original_format=original_format,
            target_format=self.policy.target_extension,
            created_output=not preexisting,
        )

    def convert_directory(self, directory: str) -> List[ConversionResult]:
        """Normalize every legacy-format file in a directory, in listing order."""
        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            logger.error(f"Failed to list {directory}: {e}")
            raise

        legacy_files = [
            os.path.join(directory, entry) for entry in entries
            if self.needs_conversion(entry) and os.path.isfile(os.path.join(directory, entry))
        ]
        logger.info(f"Found {len(legacy_files)} files to convert in {directory}")

        return [self.process_audio_file(path) for path in legacy_files]


class FFmpegConverter(Converter):
    """Converter backed by the ``ffmpeg`` executable."""

    def __init__(
        self,
        profile: Optional[ConversionProfile] = None,
        policy: FormatPolicy = DEFAULT_POLICY,
        ffmpeg_binary: str = "ffmpeg",
        ffprobe_binary: str = "ffprobe",
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the converter.

        Args:
            profile: Target audio profile (mono, 16 kHz AAC in MP4 by default)
            policy: Format policy deciding which files are converted
            ffmpeg_binary: Name or path of the ffmpeg executable
            ffprobe_binary: Name or path of the ffprobe executable
            progress_callback: Optional ``(file_name, seconds_done)`` observer
        """
        super().__init__(policy)
        self.profile = profile or ConversionProfile()
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary
        self.progress_callback = progress_callback

    def build_command(self, input_path: str, output_path: str) -> List[str]:
        profile = self.profile
        cmd = [
            self.ffmpeg_binary,
            '-hide_banner', '-nostats',
            '-loglevel', 'error',
            '-y',  # overwrite output file
            '-i', input_path,
        ]

        if profile.synthetic_video:
            # minimal black track for containers that refuse audio-only input
            cmd += [
                '-f', 'lavfi', '-i', profile.video_source,
                '-map', '1:v', '-map', '0:a', '-shortest',
                '-c:v', profile.video_codec, '-pix_fmt', 'yuv420p',
            ]
        else:
            cmd += ['-vn']

        cmd += [
            '-c:a', profile.audio_codec,
            '-ar', str(profile.sample_rate),
            '-ac', str(profile.channels),
            '-b:a', profile.audio_bitrate,
            '-f', profile.container,
            '-progress', 'pipe:1',
            output_path,
        ]
        return cmd

    def convert(self, input_path: str) -> str:
        if not os.path.isfile(input_path):
            raise ConversionError(input_path, "input file does not exist")

        output_path = self.policy.derived_output_path(input_path)
        name = os.path.basename(output_path)
        cmd = self.build_command(input_path, output_path)

        logger.info(f"Converting {os.path.basename(input_path)} to {self.profile.container}")
        logger.debug(f"FFmpeg command: {' '.join(cmd)}")

        # only stdout is a pipe; stderr is spooled to a file
        try:
            with tempfile.TemporaryFile(mode='w+') as errors:
                with subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=errors, text=True) as process:
                    for line in process.stdout:
                        self._report_progress(name, line)
                    returncode = process.wait()
                errors.seek(0)
                stderr = errors.read()
        except OSError as e:
            raise ConversionError(input_path, f"could not run {self.ffmpeg_binary}: {e}", e) from e

        if returncode != 0:
            detail = stderr.strip()[-MAX_DIAGNOSTIC_CHARS:] or f"ffmpeg exited with status {returncode}"
            logger.error(f"FFmpeg failed for {name}: {detail}")
            raise ConversionError(input_path, detail)

        if not os.path.isfile(output_path) or os.path.getsize(output_path) == 0:
            raise ConversionError(input_path, f"ffmpeg produced no output at {output_path}")

        logger.info(f"Conversion complete: {name}")
        return output_path

    def _report_progress(self, name: str, line: str) -> None:
        key, _, value = line.strip().partition('=')
        if key != 'out_time_ms':
            return
        try:
            # ffmpeg reports microseconds under this key
            seconds = int(value) / 1_000_000
        except ValueError:
            return
        logger.debug(f"Progress: {seconds:.1f}s - {name}")
        if self.progress_callback:
            self.progress_callback(name, seconds)

    def get_audio_info(self, file_path: str) -> AudioInfo:
        """
        Describe an audio file using ffprobe.

        Raises:
            ConversionError: If ffprobe cannot read the file
        """
        cmd = [
            self.ffprobe_binary,
            '-v', 'error',
            '-print_format', 'json',
            '-show_format', '-show_streams',
            file_path,
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
            metadata = json.loads(result.stdout or '{}')
        except subprocess.CalledProcessError as e:
            raise ConversionError(file_path, f"ffprobe failed: {e.stderr.strip()}", e) from e
        except (OSError, ValueError) as e:
            raise ConversionError(file_path, f"ffprobe failed: {e}", e) from e

        fmt = metadata.get('format', {})
        audio_stream = next(
            (s for s in metadata.get('streams', []) if s.get('codec_type') == 'audio'),
            None,
        )

        return AudioInfo(
            duration=_to_float(fmt.get('duration')),
            format=fmt.get('format_name'),
            size=_to_int(fmt.get('size')),
            bitrate=_to_int(fmt.get('bit_rate')),
            audio=AudioStreamInfo(
                codec=audio_stream.get('codec_name'),
                sample_rate=_to_int(audio_stream.get('sample_rate')),
                channels=_to_int(audio_stream.get('channels')),
                bitrate=_to_int(audio_stream.get('bit_rate')),
            ) if audio_stream else None,
        )

    def validate_ffmpeg(self) -> bool:
        """Check that the ffmpeg executable can be run."""
        try:
            subprocess.run([self.ffmpeg_binary, '-version'], capture_output=True, check=True)
            return True
        except (OSError, subprocess.CalledProcessError) as e:
            logger.error(f"FFmpeg is not available: {e}")
            return False


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
