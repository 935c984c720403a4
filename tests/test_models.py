import pytest

from transcription_pipeline.models import (
    BatchFailure,
    BatchReport,
    ResponseFormat,
    TimestampGranularity,
    TranscriptionMetadata,
    TranscriptionOptions,
    TranscriptionResult,
)


def test_from_mapping_parses_loose_input():
    options = TranscriptionOptions.from_mapping({
        'language': 'es',
        'response_format': 'verbose_json',
        'timestamp_granularities': 'segment, word, segment',
        'temperature': '0.4',
    })

    assert options.language == 'es'
    assert options.response_format is ResponseFormat.VERBOSE_JSON
    assert options.timestamp_granularities == (TimestampGranularity.SEGMENT, TimestampGranularity.WORD)
    assert options.temperature == 0.4


def test_from_mapping_uses_defaults():
    options = TranscriptionOptions.from_mapping({'prompt': None, 'temperature': None},
                                                TranscriptionOptions.for_translation())

    assert options.response_format is ResponseFormat.JSON
    assert options.timestamp_granularities == ()
    assert options.temperature == 0.0


@pytest.mark.parametrize('data', [
    {'response_format': 'srt'},
    {'timestamp_granularities': 'segment,char'},
    {'temperature': 'hot'},
    {'temperature': -0.5},
])
def test_from_mapping_rejects_bad_values(data):
    with pytest.raises(ValueError):
        TranscriptionOptions.from_mapping(data)


def test_result_text_extraction():
    metadata = TranscriptionMetadata('a.mp3', '/a.mp3', '/a.mp3', False, 'm')

    assert TranscriptionResult('plain', metadata).text == 'plain'
    assert TranscriptionResult({'text': 'hi', 'segments': []}, metadata).text == 'hi'
    assert '"duration": 3' in TranscriptionResult({'duration': 3}, metadata).text


def test_batch_report_counts_and_serializes():
    metadata = TranscriptionMetadata('a.mp3', '/a.mp3', '/a.mp3', False, 'm', timestamp='t')
    report = BatchReport(results=[
        TranscriptionResult('ok', metadata),
        BatchFailure(error='transcribe failed', file_name='b.mp3', file_path='/b.mp3', timestamp='t'),
    ])

    data = report.to_dict()

    assert data['summary'] == {'total': 2, 'successful': 1, 'failed': 1}
    assert data['results'][1] == {
        'success': False,
        'error': 'transcribe failed',
        'metadata': {'file_name': 'b.mp3', 'file_path': '/b.mp3', 'timestamp': 't'},
    }
    assert data['results'][0]['metadata']['language'] == 'auto-detect'
