"""Whisper STT implementation using faster-whisper.

Uploads are first normalized to 16 kHz mono samples through the shared
``TranscodeQueue`` and then transcribed in a worker thread. The WhisperModel
is loaded lazily and cached at module level to avoid repeated initialization
overhead.
"""

import asyncio
import logging

import numpy as np
from faster_whisper import WhisperModel

from src.core.config import get_settings
from src.core.exceptions import TranscriptionError
from src.services.audio.processor import AudioProcessor
from src.services.audio.transcoder import TranscodeQueue
from src.services.transcription.base import BaseTranscriber

logger = logging.getLogger(__name__)

_model_cache: WhisperModel | None = None

# MIME subtype -> ffmpeg demuxer name where they differ
_FORMAT_ALIASES = {"mpeg": "mp3", "x-wav": "wav", "wave": "wav", "mp4": "m4a", "x-m4a": "m4a"}


def format_from_content_type(content_type: str | None) -> str | None:
    """Map ``audio/webm;codecs=opus`` style types to an ffmpeg format name."""
    if not content_type or "/" not in content_type:
        return None
    subtype = content_type.split("/", 1)[1].split(";", 1)[0].strip().lower()
    return _FORMAT_ALIASES.get(subtype, subtype) or None


class WhisperTranscriber(BaseTranscriber):
    """Speech-to-text provider using faster-whisper (CTranslate2).

    Args:
        transcode_queue: Shared queue that decodes uploads one at a time.
        model_size: Whisper model size (tiny, base, small, medium, large-v3).
        device: Computation device ("cpu" or "cuda").
        compute_type: CTranslate2 compute type ("int8", "float16", etc.).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        transcode_queue: TranscodeQueue,
        model_size: str | None = None,
        device: str | None = None,
        compute_type: str | None = None,
        settings=None,
    ) -> None:
        self._settings = settings or get_settings()
        self._queue = transcode_queue
        self._model_size = model_size or self._settings.whisper_model
        self._device = device or self._settings.whisper_device
        self._compute_type = compute_type or self._settings.whisper_compute_type
        self._processor = AudioProcessor()

    def _get_model(self) -> WhisperModel:
        """Return the cached WhisperModel, loading it on first use."""
        global _model_cache  # noqa: PLW0603
        if _model_cache is None:
            logger.info(
                "Loading Whisper model: %s (device=%s, compute=%s)",
                self._model_size,
                self._device,
                self._compute_type,
            )
            _model_cache = WhisperModel(
                self._model_size,
                device=self._device,
                compute_type=self._compute_type,
            )
        return _model_cache

    def _run_transcription(self, audio: np.ndarray, language: str | None, beam_size: int = 5) -> str:
        """Run synchronous transcription (CPU-bound).

        Must be called via asyncio.to_thread(). The segment iterator is
        materialized inside this function to avoid CTranslate2 thread-safety
        issues.
        """
        model = self._get_model()
        segments_iter, _info = model.transcribe(
            audio,
            language=language,
            beam_size=beam_size,
            vad_filter=True,
        )
        return " ".join(seg.text.strip() for seg in segments_iter if seg.text.strip())

    async def transcribe(self, audio: bytes, language: str, **kwargs) -> str:
        """Decode, then transcribe one recording."""
        if not audio:
            raise TranscriptionError("The uploaded audio file is empty.")

        samples = await self._queue.submit(audio, fmt=format_from_content_type(kwargs.get("content_type")))
        if self._processor.is_silent(samples):
            logger.info("Recording %s is silent; empty transcript", kwargs.get("label", "audio"))
            return ""

        try:
            return await asyncio.to_thread(
                self._run_transcription,
                samples,
                language or None,
                kwargs.get("beam_size", 5),
            )
        except Exception as exc:
            raise TranscriptionError(detail=f"Whisper transcription failed: {exc}") from exc
