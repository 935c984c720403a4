import pytest

from transcription_pipeline.exceptions import UnsupportedFormatError
from transcription_pipeline.formats import DEFAULT_POLICY, FormatPolicy, is_supported_audio_file


@pytest.mark.parametrize('name', [
    'a.mp3', 'a.wav', 'a.m4a', 'a.flac', 'a.ogg', 'a.opus',
    'a.webm', 'a.mp4', 'a.mpeg', 'a.mpga', 'LOUD.MP3',
])
def test_supported_extensions(name):
    assert DEFAULT_POLICY.is_supported(name)
    assert is_supported_audio_file(name)


@pytest.mark.parametrize('name', ['notes.txt', 'archive', '', 'song.', '.opus', 'clip.aac'])
def test_unknown_or_missing_extension_is_rejected(name):
    assert not DEFAULT_POLICY.is_supported(name)
    assert not DEFAULT_POLICY.needs_conversion(name)


def test_only_opus_needs_conversion():
    assert DEFAULT_POLICY.needs_conversion('/data/voice.opus')
    assert DEFAULT_POLICY.needs_conversion('/data/VOICE.OPUS')
    assert not DEFAULT_POLICY.needs_conversion('/data/voice.mp3')
    assert not DEFAULT_POLICY.needs_conversion('/data/voice.ogg')


def test_derived_output_path_keeps_directory_and_base_name():
    assert DEFAULT_POLICY.derived_output_path('/data/in/voice.opus') == '/data/in/voice.mp4'
    assert DEFAULT_POLICY.derived_output_path('voice.note.opus') == 'voice.note.mp4'


def test_custom_policy_normalizes_extensions():
    policy = FormatPolicy(supported_extensions=['.WAV', 'amr'], legacy_extensions=['AMR'], target_extension='.wav')

    assert policy.is_supported('call.amr')
    assert policy.needs_conversion('call.amr')
    assert not policy.is_supported('call.mp3')
    assert policy.derived_output_path('call.amr') == 'call.wav'


def test_check_raises_for_unsupported_file():
    DEFAULT_POLICY.check('voice.opus')

    with pytest.raises(UnsupportedFormatError) as excinfo:
        DEFAULT_POLICY.check('/tmp/slides.pdf')

    assert 'slides.pdf' in str(excinfo.value)
