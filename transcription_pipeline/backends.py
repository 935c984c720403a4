"""
Backends for the remote speech-recognition service.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple, Union

import requests
from requests.adapters import HTTPAdapter

from . import __version__
from .exceptions import RemoteServiceError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"

Payload = Union[str, Dict[str, Any]]


class TranscriptionBackend(ABC):
    """Abstract remote service that turns audio into text."""

    @abstractmethod
    def transcribe(self, file_path: str, params: Dict[str, Any]) -> Payload:
        """
        Transcribe an audio file.

        Args:
            file_path: File to upload
            params: Request fields (model, response_format, temperature, ...)

        Returns:
            The service response, a string or a decoded JSON object

        Raises:
            RemoteServiceError: If the service cannot be reached or rejects the call
        """

    @abstractmethod
    def translate(self, file_path: str, params: Dict[str, Any]) -> Payload:
        """Translate an audio file into English text."""


class GroqBackend(TranscriptionBackend):
    """Client for Groq's OpenAI-compatible audio endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120,
    ):
        """
        Initialize the backend.

        Args:
            api_key: Groq API key
            base_url: Base URL of the OpenAI-compatible API
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise ValueError("A Groq API key is required")

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

        self.session = requests.Session()

        # One attempt per file; no transport-level retries
        adapter = HTTPAdapter(max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'User-Agent': f'transcription-pipeline/{__version__}',
        })

    def transcribe(self, file_path: str, params: Dict[str, Any]) -> Payload:
        return self._post_audio('transcribe', '/audio/transcriptions', file_path, params)

    def translate(self, file_path: str, params: Dict[str, Any]) -> Payload:
        return self._post_audio('translate', '/audio/translations', file_path, params)

    @staticmethod
    def encode_fields(params: Dict[str, Any]) -> List[Tuple[str, str]]:
        """Flatten request params into multipart form fields."""
        fields = []
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                fields.extend((f"{key}[]", str(item)) for item in value)
            else:
                fields.append((key, str(value)))
        return fields

    def _post_audio(self, operation: str, endpoint: str, file_path: str, params: Dict[str, Any]) -> Payload:
        url = f"{self.base_url}{endpoint}"
        file_name = os.path.basename(file_path)

        try:
            with open(file_path, 'rb') as audio:
                response = self.session.post(
                    url,
                    data=self.encode_fields(params),
                    files={'file': (file_name, audio)},
                    timeout=self.timeout,
                )
        except requests.RequestException as e:
            logger.error(f"{operation} request for {file_name} failed: {e}")
            raise RemoteServiceError(operation, 'network', type(e).__name__, cause=e) from e

        if not response.ok:
            raise self._error_for(operation, response)

        if params.get('response_format') == 'text':
            return response.text

        try:
            return response.json()
        except ValueError as e:
            raise RemoteServiceError(operation, 'response', 'response body is not valid JSON',
                                     status_code=response.status_code, cause=e) from e

    @staticmethod
    def _error_for(operation: str, response: requests.Response) -> RemoteServiceError:
        status = response.status_code
        if status in (401, 403):
            reason = 'auth'
        elif status == 429:
            reason = 'quota'
        else:
            reason = 'response'

        try:
            detail = response.json()['error']['message']
        except (ValueError, KeyError, TypeError):
            detail = response.text[:200] or response.reason or 'no details'

        logger.error(f"{operation} request rejected with HTTP {status}: {detail}")
        return RemoteServiceError(operation, reason, detail, status_code=status)
