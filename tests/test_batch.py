import os

import pytest

from conftest import FakeBackend, FakeConverter, write_file
from transcription_pipeline.batch import BatchRunner
from transcription_pipeline.client import TranscriptionClient
from transcription_pipeline.exceptions import NotFoundError
from transcription_pipeline.models import BatchFailure
from transcription_pipeline.pipeline import TranscriptionPipeline


def names(report):
    return [
        r.file_name if isinstance(r, BatchFailure) else r.metadata.file_name
        for r in report.results
    ]


def test_discovers_only_supported_files(pipeline, audio_dir):
    write_file(audio_dir / 'c.flac')
    write_file(audio_dir / 'a.mp3')
    write_file(audio_dir / 'b.txt')
    (audio_dir / 'nested.mp3').mkdir()

    files = BatchRunner(pipeline).list_audio_files(str(audio_dir))

    assert [os.path.basename(f) for f in files] == ['a.mp3', 'c.flac']


def test_failure_is_isolated_to_its_file(converter, audio_dir):
    for name in ['a.mp3', 'b.wav', 'c.ogg', 'd.m4a']:
        write_file(audio_dir / name)
    backend = FakeBackend(fail_on={'b.wav'})
    pipeline = TranscriptionPipeline(TranscriptionClient(backend), converter)

    report = pipeline.process_audio_directory(str(audio_dir))

    assert names(report) == ['a.mp3', 'b.wav', 'c.ogg', 'd.m4a']
    assert [r.success for r in report.results] == [True, False, True, True]
    assert report.results[1].error.startswith('transcribe')
    assert report.total == 4
    assert report.successful + report.failed == report.total == len(report.results)
    assert len(backend.calls) == 4


def test_conversion_failure_does_not_stop_batch(client, audio_dir):
    write_file(audio_dir / 'a.opus')
    write_file(audio_dir / 'b.mp3')
    pipeline = TranscriptionPipeline(client, FakeConverter(fail=True))

    report = pipeline.process_audio_directory(str(audio_dir))

    assert [r.success for r in report.results] == [False, True]
    assert report.to_dict()['summary'] == {'total': 2, 'successful': 1, 'failed': 1}


def test_successes_are_saved_to_output_dir(pipeline, audio_dir, tmp_path):
    write_file(audio_dir / 'a.mp3')
    write_file(audio_dir / 'voice.opus')
    output_dir = tmp_path / 'texts'

    report = pipeline.process_audio_directory(str(audio_dir), output_dir=str(output_dir))

    assert sorted(os.listdir(output_dir)) == ['a.txt', 'voice.txt']
    assert all(r.saved_path for r in report.results)


def test_write_failure_becomes_failure_record(pipeline, audio_dir, tmp_path):
    write_file(audio_dir / 'a.mp3')
    blocker = write_file(tmp_path / 'texts')

    report = pipeline.process_audio_directory(str(audio_dir), output_dir=blocker)

    assert report.failed == 1
    assert 'Failed to write transcript' in report.results[0].error


def test_worker_pool_keeps_discovery_order(converter, audio_dir):
    files = [f'{i:02d}.mp3' for i in range(12)]
    for name in files:
        write_file(audio_dir / name)
    backend = FakeBackend(fail_on={'03.mp3', '07.mp3'})
    pipeline = TranscriptionPipeline(TranscriptionClient(backend), converter)

    report = pipeline.process_audio_directory(str(audio_dir), max_workers=4)

    assert names(report) == files
    assert report.failed == 2
    assert not report.results[3].success and not report.results[7].success


def test_empty_directory_gives_empty_report(pipeline, audio_dir):
    report = pipeline.process_audio_directory(str(audio_dir))

    assert report.to_dict() == {'results': [], 'summary': {'total': 0, 'successful': 0, 'failed': 0}}


def test_missing_directory_propagates(pipeline, tmp_path):
    with pytest.raises(NotFoundError):
        pipeline.process_audio_directory(str(tmp_path / 'nope'))


def test_invalid_worker_count(pipeline, audio_dir):
    with pytest.raises(ValueError):
        pipeline.process_audio_directory(str(audio_dir), max_workers=0)


def test_cleanup_batch_leaves_existing_mp4_in_place(client, converter, audio_dir):
    write_file(audio_dir / 'talk.mp4', b'caller original')
    write_file(audio_dir / 'talk.opus')
    pipeline = TranscriptionPipeline(client, converter, cleanup_converted=True)

    report = pipeline.process_audio_directory(str(audio_dir))

    assert [r.success for r in report.results] == [True, True]
    assert sorted(os.listdir(audio_dir)) == ['talk.mp4', 'talk.opus']
