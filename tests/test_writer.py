import json
import os

import pytest

from transcription_pipeline.exceptions import NotFoundError, TranscriptWriteError, UnsupportedFormatError
from transcription_pipeline.models import TranscriptionMetadata, TranscriptionResult
from transcription_pipeline.writer import TranscriptWriter


def make_result(payload, operation='transcribe', **overrides):
    fields = dict(
        file_name='voice.opus',
        original_file_path='/in/voice.opus',
        processed_file_path='/in/voice.mp4',
        was_converted=True,
        model='whisper-large-v3-turbo',
        operation=operation,
        timestamp='2026-10-18T09:30:00+00:00',
    )
    fields.update(overrides)
    return TranscriptionResult(payload=payload, metadata=TranscriptionMetadata(**fields))


def test_save_writes_header_and_text(tmp_path):
    output_dir = tmp_path / 'texts'

    path = TranscriptWriter().save(make_result({'text': 'Hola a todos', 'segments': []}, language='es'), str(output_dir))

    assert path == str(output_dir / 'voice.txt')
    with open(path, encoding='utf-8') as f:
        assert f.read() == (
            "# Automatically generated transcription\n"
            "# File: voice.opus\n"
            "# Model: whisper-large-v3-turbo\n"
            "# Date: 2026-10-18T09:30:00+00:00\n"
            "# Language: es\n"
            "\n"
            "Hola a todos\n"
        )


def test_plain_string_payload(tmp_path):
    path = TranscriptWriter().save(make_result('just text'), str(tmp_path))

    with open(path, encoding='utf-8') as f:
        content = f.read()
    assert content.endswith('\njust text\n')
    assert '# Language: auto-detect' in content


def test_payload_without_text_is_dumped(tmp_path):
    payload = {'segments': [{'start': 0.0, 'end': 1.0}]}

    path = TranscriptWriter().save(make_result(payload), str(tmp_path))

    with open(path, encoding='utf-8') as f:
        body = f.read().split('\n\n', 1)[1]
    assert json.loads(body) == payload


def test_translation_header_uses_target_language(tmp_path):
    result = make_result({'text': 'Hello'}, operation='translate', target_language='en', model='whisper-large-v3')

    path = TranscriptWriter().save(result, str(tmp_path))

    with open(path, encoding='utf-8') as f:
        content = f.read()
    assert '# Language: en' in content
    assert '# Model: whisper-large-v3\n' in content


def test_save_overwrites_previous_artifact(tmp_path):
    writer = TranscriptWriter()

    writer.save(make_result('first'), str(tmp_path))
    path = writer.save(make_result('second'), str(tmp_path))

    assert os.listdir(tmp_path) == ['voice.txt']
    with open(path, encoding='utf-8') as f:
        assert f.read().endswith('\nsecond\n')


def test_filesystem_failure_raises_write_error(tmp_path):
    blocker = tmp_path / 'texts'
    blocker.write_text('not a directory')

    with pytest.raises(TranscriptWriteError) as excinfo:
        TranscriptWriter().save(make_result('x'), str(blocker))

    assert isinstance(excinfo.value, OSError)


def test_list_and_read_transcriptions(tmp_path):
    writer = TranscriptWriter()
    writer.save(make_result('b body', file_name='b.mp3'), str(tmp_path))
    writer.save(make_result('a body', file_name='a.wav'), str(tmp_path))
    (tmp_path / 'notes.md').write_text('ignored')

    transcripts = writer.list_transcriptions(str(tmp_path))

    assert [t.name for t in transcripts] == ['a.txt', 'b.txt']
    assert transcripts[0].size > 0
    assert writer.read_transcription(str(tmp_path), 'b.txt').endswith('\nb body\n')


def test_read_transcription_errors(tmp_path):
    writer = TranscriptWriter()

    with pytest.raises(UnsupportedFormatError):
        writer.read_transcription(str(tmp_path), 'notes.md')
    with pytest.raises(UnsupportedFormatError):
        writer.read_transcription(str(tmp_path), '../secret.txt')
    with pytest.raises(NotFoundError):
        writer.read_transcription(str(tmp_path), 'missing.txt')
    with pytest.raises(NotFoundError):
        writer.list_transcriptions(str(tmp_path / 'nope'))
