import os

import pytest

from transcription_pipeline.backends import TranscriptionBackend
from transcription_pipeline.client import TranscriptionClient
from transcription_pipeline.converter import Converter
from transcription_pipeline.exceptions import ConversionError, RemoteServiceError
from transcription_pipeline.pipeline import TranscriptionPipeline


class FakeBackend(TranscriptionBackend):
    """Returns a canned payload per file; names in ``fail_on`` raise."""

    def __init__(self, payload=None, error=None, fail_on=()):
        self.payload = payload
        self.error = error
        self.fail_on = set(fail_on)
        self.calls = []

    def _respond(self, operation, file_path, params):
        self.calls.append((operation, file_path, dict(params)))
        if self.error:
            raise self.error
        name = os.path.basename(file_path)
        if name in self.fail_on:
            raise RemoteServiceError(operation, 'response', f'could not decode {name}', status_code=400)
        if self.payload is not None:
            return self.payload
        return {'text': f'text of {name}', 'segments': []}

    def transcribe(self, file_path, params):
        return self._respond('transcribe', file_path, params)

    def translate(self, file_path, params):
        return self._respond('translate', file_path, params)


class FakeConverter(Converter):
    """Writes a small placeholder file instead of running ffmpeg."""

    def __init__(self, fail=False):
        super().__init__()
        self.fail = fail
        self.converted = []

    def convert(self, input_path):
        if self.fail:
            raise ConversionError(input_path, 'Invalid data found when processing input')
        output_path = self.policy.derived_output_path(input_path)
        with open(output_path, 'wb') as f:
            f.write(b'converted audio')
        self.converted.append(input_path)
        return output_path


def write_file(path, data=b'audio bytes'):
    with open(path, 'wb') as f:
        f.write(data)
    return str(path)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def converter():
    return FakeConverter()


@pytest.fixture
def client(backend):
    return TranscriptionClient(backend, model='whisper-large-v3-turbo')


@pytest.fixture
def pipeline(client, converter):
    return TranscriptionPipeline(client, converter)


@pytest.fixture
def audio_dir(tmp_path):
    directory = tmp_path / 'audios'
    directory.mkdir()
    return directory
