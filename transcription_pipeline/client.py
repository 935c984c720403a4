"""
Adapter that turns transcription options into backend requests.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional, Tuple

from .backends import Payload, TranscriptionBackend
from .exceptions import RemoteServiceError
from .models import TranscriptionOptions

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "whisper-large-v3-turbo"
TRANSLATION_TARGET_LANGUAGE = "en"

# Fast variants the service cannot use for translation, and their replacement
TRANSLATION_MODEL_OVERRIDES = {
    "whisper-large-v3-turbo": "whisper-large-v3",
}


class TranscriptionClient:
    """Sends one request per file to a transcription backend."""

    def __init__(
        self,
        backend: TranscriptionBackend,
        model: str = DEFAULT_MODEL,
        translation_overrides: Optional[Mapping[str, str]] = None,
    ):
        self.backend = backend
        self.model = model
        self.translation_overrides = dict(
            TRANSLATION_MODEL_OVERRIDES if translation_overrides is None else translation_overrides
        )

    def translation_model(self) -> str:
        """Model used for translation calls; ``self.model`` is left untouched."""
        return self.translation_overrides.get(self.model, self.model)

    def build_transcription_params(self, options: TranscriptionOptions) -> Dict[str, Any]:
        params = {
            'model': self.model,
            'response_format': options.response_format.value,
            'temperature': options.temperature,
        }

        if options.language:
            params['language'] = options.language

        if options.prompt:
            params['prompt'] = options.prompt

        if options.response_format.supports_segments and options.timestamp_granularities:
            params['timestamp_granularities'] = [g.value for g in options.timestamp_granularities]

        return params

    def build_translation_params(self, options: TranscriptionOptions) -> Dict[str, Any]:
        params = {
            'model': self.translation_model(),
            'response_format': options.response_format.value,
            'temperature': options.temperature,
            'language': TRANSLATION_TARGET_LANGUAGE,
        }

        if options.prompt:
            params['prompt'] = options.prompt

        return params

    def transcribe(self, file_path: str, options: TranscriptionOptions) -> Tuple[Payload, str]:
        """
        Transcribe a normalized file.

        Returns:
            Tuple of (service payload, model that ran)

        Raises:
            RemoteServiceError: On any backend failure
        """
        params = self.build_transcription_params(options)
        logger.info(f"Transcribing {os.path.basename(file_path)} with {params['model']}")
        payload = self._call('transcribe', self.backend.transcribe, file_path, params)
        return payload, params['model']

    def translate(self, file_path: str, options: TranscriptionOptions) -> Tuple[Payload, str]:
        """
        Translate a normalized file into English.

        Returns:
            Tuple of (service payload, model that ran)

        Raises:
            RemoteServiceError: On any backend failure
        """
        params = self.build_translation_params(options)
        if params['model'] != self.model:
            logger.info(f"{self.model} cannot translate, using {params['model']} for this request")
        logger.info(f"Translating {os.path.basename(file_path)} with {params['model']}")
        payload = self._call('translate', self.backend.translate, file_path, params)
        return payload, params['model']

    @staticmethod
    def _call(operation, method, file_path, params) -> Payload:
        try:
            return method(file_path, params)
        except RemoteServiceError:
            raise
        except Exception as e:
            logger.error(f"{operation} backend call failed: {e}")
            raise RemoteServiceError(operation, 'response', str(e), cause=e) from e
