"""Gemini STT implementation over the Generative Language REST API.

The recording is sent inline (base64) together with a verbatim-transcription
prompt; the first candidate's first text part is the transcript.
"""

import base64
import logging

import httpx

from src.core.config import get_settings
from src.core.exceptions import TranscriptionError
from src.services.transcription.base import BaseTranscriber

logger = logging.getLogger(__name__)

_LANGUAGE_NAMES = {"id": "Indonesian", "en": "English"}


class GeminiTranscriber(BaseTranscriber):
    """Hosted multimodal transcription.

    Args:
        api_key: Generative Language API key.
        model: Model name, e.g. ``gemini-2.5-pro-latest``.
        base_url: API root up to and including the version segment.
        timeout: Per-request timeout in seconds.
        client: Optional pre-built ``httpx.AsyncClient`` (tests).
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.gemini_api_key
        self._model = model or settings.gemini_model
        self._base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self._timeout = timeout or settings.gemini_timeout
        self._client = client

    @staticmethod
    def build_prompt(language: str) -> str:
        language_name = _LANGUAGE_NAMES.get(language, language)
        return f"The following audio is in {language_name}. Please transcribe it accurately and verbatim."

    def _payload(self, audio: bytes, language: str, content_type: str) -> dict:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": self.build_prompt(language)},
                        {
                            "inline_data": {
                                "mime_type": content_type,
                                "data": base64.b64encode(audio).decode("ascii"),
                            }
                        },
                    ],
                }
            ]
        }

    @staticmethod
    def _extract_text(body: dict) -> str:
        try:
            return (body["candidates"][0]["content"]["parts"][0].get("text") or "").strip()
        except (KeyError, IndexError, TypeError, AttributeError):
            return ""

    async def transcribe(self, audio: bytes, language: str, **kwargs) -> str:
        """Send the recording to Gemini and return its verbatim transcript."""
        if not audio:
            raise TranscriptionError("The uploaded audio file is empty.")

        content_type = kwargs.get("content_type") or "audio/webm"
        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload = self._payload(audio, language, content_type)

        try:
            if self._client is not None:
                resp = await self._client.post(url, params={"key": self._api_key}, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(url, params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as exc:
            raise TranscriptionError(f"Failed to reach Gemini: {exc}") from exc

        if resp.is_error:
            logger.error("Gemini API error %s: %s", resp.status_code, resp.text)
            raise TranscriptionError(f"Gemini API returned {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise TranscriptionError("Gemini returned a non-JSON body") from exc
        return self._extract_text(body)
