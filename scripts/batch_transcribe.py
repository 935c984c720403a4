#!/usr/bin/env python3
"""
Command-line utility for transcribing and translating audio files.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Add the parent directory to Python path to import transcription_pipeline
sys.path.insert(0, str(Path(__file__).parent.parent))

from transcription_pipeline.config import PipelineConfig
from transcription_pipeline.converter import FFmpegConverter
from transcription_pipeline.exceptions import (
    NotFoundError,
    PipelineStageError,
    UnsupportedFormatError,
)
from transcription_pipeline.formats import FormatPolicy
from transcription_pipeline.models import TranscriptionOptions
from transcription_pipeline.pipeline import TranscriptionPipeline, get_file_info
from transcription_pipeline.utils import format_duration, format_file_size
from transcription_pipeline.writer import TranscriptWriter

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def load_env_file(env_file: str = '.env'):
    """
    Load environment variables from .env file.

    Args:
        env_file: Path to the .env file
    """
    env_path = Path(env_file)
    if not env_path.exists():
        logger.debug(f"Environment file not found: {env_file}")
        return

    with open(env_path, 'r') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if key and not os.getenv(key):  # Don't override existing env vars
                    os.environ[key] = value

    logger.info(f"Loaded environment variables from {env_file}")


def user_message(error: Exception) -> str:
    """Map a pipeline error to a message safe to show to users."""
    cause = error.cause if isinstance(error, PipelineStageError) else error
    if isinstance(cause, NotFoundError):
        return f"File not found: {cause.path}"
    if isinstance(cause, UnsupportedFormatError):
        return str(cause)
    if isinstance(cause, ValueError):
        return f"Invalid option: {cause}"
    return "Transcription service error, please try again later"


def create_pipeline(config: PipelineConfig) -> TranscriptionPipeline:
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        sys.exit(1)
    return TranscriptionPipeline.from_config(config)


def create_converter(config: PipelineConfig) -> FFmpegConverter:
    return FFmpegConverter(
        policy=FormatPolicy(supported_extensions=config.allowed_formats),
        ffmpeg_binary=config.ffmpeg_binary,
        ffprobe_binary=config.ffprobe_binary,
    )


def options_from_args(args, defaults: TranscriptionOptions) -> TranscriptionOptions:
    return TranscriptionOptions.from_mapping({
        'language': getattr(args, 'language', None),
        'prompt': args.prompt,
        'response_format': args.response_format,
        'timestamp_granularities': getattr(args, 'timestamp_granularities', None),
        'temperature': args.temperature,
    }, defaults)


def print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def transcribe(args, config: PipelineConfig):
    """Transcribe or translate a single file."""
    pipeline = create_pipeline(config)
    pipeline.check_upload(args.file, config.max_file_size)

    if args.command == 'translate':
        options = options_from_args(args, TranscriptionOptions.for_translation())
        result = pipeline.translate_file(args.file, options)
    else:
        options = options_from_args(args, TranscriptionOptions.for_transcription())
        result = pipeline.transcribe_file(args.file, options)

    if args.save:
        pipeline.save_transcription(result, args.output_dir or config.texts_dir)

    print_json(result.to_dict())


def batch(args, config: PipelineConfig):
    """Transcribe every audio file in a directory."""
    pipeline = create_pipeline(config)
    options = options_from_args(args, TranscriptionOptions.for_transcription())
    output_dir = None if args.no_save else (args.output_dir or config.texts_dir)

    report = pipeline.process_audio_directory(
        args.directory or config.audio_dir,
        options,
        output_dir=output_dir,
        max_workers=args.workers,
        show_progress=True,
    )

    print_json(report.to_dict())
    print(f"✅ Successful: {report.successful}/{report.total}")
    print(f"❌ Failed: {report.failed}")

    if report.failed:
        sys.exit(1)


def list_files(args, config: PipelineConfig):
    """List audio files in a directory."""
    policy = FormatPolicy(supported_extensions=config.allowed_formats)
    directory = args.directory or config.audio_dir

    if not os.path.isdir(directory):
        raise NotFoundError(directory)

    files = []
    for entry in sorted(os.listdir(directory)):
        path = os.path.join(directory, entry)
        if os.path.isfile(path) and policy.is_supported(path):
            files.append(get_file_info(path, policy))

    print(f"Found {len(files)} audio files:\n")
    for info in files:
        print(f"🎵 {info.name} ({format_file_size(info.size)}, modified {info.last_modified:%Y-%m-%d %H:%M})")


def list_transcriptions(args, config: PipelineConfig):
    """List saved transcripts."""
    transcripts = TranscriptWriter().list_transcriptions(args.directory or config.texts_dir)

    print(f"Found {len(transcripts)} transcriptions:\n")
    for info in transcripts:
        print(f"📄 {info.name} ({format_file_size(info.size)}, modified {info.last_modified:%Y-%m-%d %H:%M})")


def show_transcription(args, config: PipelineConfig):
    """Print a saved transcript."""
    print(TranscriptWriter().read_transcription(args.output_dir or config.texts_dir, args.name))


def probe(args, config: PipelineConfig):
    """Show ffprobe details for an audio file."""
    converter = create_converter(config)
    info = converter.get_audio_info(args.file)

    print(f"🎵 {os.path.basename(args.file)}")
    print(f"   Format: {info.format}")
    print(f"   Duration: {format_duration(info.duration)}")
    print(f"   Size: {format_file_size(info.size)}")
    if info.audio:
        print(f"   Audio: {info.audio.codec}, {info.audio.sample_rate} Hz, {info.audio.channels} ch")
    print(f"   Needs conversion: {'yes' if converter.needs_conversion(args.file) else 'no'}")


def check(args, config: PipelineConfig):
    """Validate configuration and the ffmpeg installation."""
    errors = config.validate()
    print("🔧 Configuration:")
    for key, value in config.to_public_dict().items():
        print(f"   {key}: {value}")

    for error in errors:
        print(f"❌ {error}")

    ffmpeg_ok = create_converter(config).validate_ffmpeg()
    print(f"{'✅' if ffmpeg_ok else '❌'} ffmpeg available: {ffmpeg_ok}")

    if errors or not ffmpeg_ok:
        sys.exit(1)


def add_option_args(parser, translation: bool = False):
    parser.add_argument('--prompt', help='Text to guide the model style or vocabulary')
    parser.add_argument('--response-format', choices=['text', 'json', 'verbose_json'],
                        help='Response format (default: verbose_json, json for translations)')
    parser.add_argument('--temperature', type=float, help='Sampling temperature (default: 0)')
    if not translation:
        parser.add_argument('--language', help='ISO-639-1 language code (default: auto-detect)')
        parser.add_argument('--timestamp-granularities',
                            help='Comma-separated list of segment,word (verbose_json only)')


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Transcribe audio files with Groq Whisper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Setup: put GROQ_TOKEN in .env
  echo 'GROQ_TOKEN=gsk_...' > .env

  # Transcribe a single file and save it to texts/
  python -m scripts.batch_transcribe transcribe voice.opus --language es --save

  # Translate to English
  python -m scripts.batch_transcribe translate interview.mp3

  # Transcribe every file in audios/ with two workers
  python -m scripts.batch_transcribe batch audios --workers 2

  # Inspect results
  python -m scripts.batch_transcribe transcriptions
  python -m scripts.batch_transcribe show voice.txt
        """
    )

    parser.add_argument('--env-file', default='.env', help='Environment file to load (default: .env)')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    for name, help_text in (('transcribe', 'Transcribe one audio file'),
                            ('translate', 'Translate one audio file to English')):
        file_parser = subparsers.add_parser(name, help=help_text)
        file_parser.add_argument('file', help='Audio file path')
        file_parser.add_argument('--save', action='store_true', help='Save the transcript as text')
        file_parser.add_argument('--output-dir', help='Transcript directory (default: TEXTS_DIR)')
        add_option_args(file_parser, translation=(name == 'translate'))

    batch_parser = subparsers.add_parser('batch', help='Transcribe all audio files in a directory')
    batch_parser.add_argument('directory', nargs='?', help='Audio directory (default: AUDIO_DIR)')
    batch_parser.add_argument('--output-dir', help='Transcript directory (default: TEXTS_DIR)')
    batch_parser.add_argument('--no-save', action='store_true', help='Do not save transcripts')
    batch_parser.add_argument('--workers', type=int, default=1, help='Files processed in parallel (default: 1)')
    add_option_args(batch_parser)

    files_parser = subparsers.add_parser('files', help='List audio files')
    files_parser.add_argument('directory', nargs='?', help='Audio directory (default: AUDIO_DIR)')

    transcripts_parser = subparsers.add_parser('transcriptions', help='List saved transcripts')
    transcripts_parser.add_argument('directory', nargs='?', help='Transcript directory (default: TEXTS_DIR)')

    show_parser = subparsers.add_parser('show', help='Print a saved transcript')
    show_parser.add_argument('name', help='Transcript file name, e.g. voice.txt')
    show_parser.add_argument('--output-dir', help='Transcript directory (default: TEXTS_DIR)')

    probe_parser = subparsers.add_parser('probe', help='Show audio details via ffprobe')
    probe_parser.add_argument('file', help='Audio file path')

    subparsers.add_parser('check', help='Validate configuration and ffmpeg')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load environment variables
    load_env_file(args.env_file)
    config = PipelineConfig.from_env()

    commands = {
        'transcribe': transcribe,
        'translate': transcribe,
        'batch': batch,
        'files': list_files,
        'transcriptions': list_transcriptions,
        'show': show_transcription,
        'probe': probe,
        'check': check,
    }

    try:
        commands[args.command](args, config)
    except (PipelineStageError, NotFoundError, UnsupportedFormatError, ValueError) as e:
        logger.debug(f"Command failed: {e}")
        print(f"❌ {user_message(e)}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
