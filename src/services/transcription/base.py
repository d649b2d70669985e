"""
Abstract base class for Speech-to-Text providers.

All STT implementations (hosted Gemini, local Whisper, etc.) must implement
this interface, enabling provider-agnostic transcription in the review
pipeline.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BaseTranscriber(ABC):
    """Interface that every STT provider must implement."""

    @abstractmethod
    async def transcribe(self, audio: bytes, language: str, **kwargs) -> str:
        """Transcribe one recording to plain text.

        Args:
            audio: Raw uploaded audio (WebM, WAV, ...).
            language: ISO 639-1 language hint, e.g. ``"id"``.
            **kwargs: Optional keys: ``content_type``, ``label``.

        Returns:
            The transcript, ``""`` when the recording contains no speech.

        Raises:
            TranscriptionError: When the provider fails.
        """


class NullTranscriber(BaseTranscriber):
    """Used when no STT provider is configured; always yields ``""``."""

    def __init__(self, reason: str = "no transcription provider configured") -> None:
        self._reason = reason

    async def transcribe(self, audio: bytes, language: str, **kwargs) -> str:
        logger.warning(
            "Skipping transcription for %s: %s", kwargs.get("label", "audio"), self._reason
        )
        return ""
