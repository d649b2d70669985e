"""Serialized audio transcoding queue.

Browser and microphone recordings arrive as WebM/Opus or WAV at arbitrary
sample rates. The local Whisper backend needs 16 kHz mono float32 samples,
so every upload is normalized through pydub (ffmpeg) first.

Decoding is funnelled through one ``TranscodeQueue`` shared by all requests:
a single worker task pulls jobs off an ``asyncio.Queue`` and decodes them one
at a time in a worker thread, resolving a future per job.

Usage::

    queue = TranscodeQueue()
    queue.start()
    samples = await queue.submit(audio_bytes, fmt="webm")
    await queue.stop()
"""

import asyncio
import io
import logging
from dataclasses import dataclass, field

import numpy as np
from pydub import AudioSegment

from src.core.exceptions import TranscodingError
from src.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)

TARGET_SAMPLE_RATE = 16000


@dataclass
class TranscodeJob:
    """One pending decode request."""

    data: bytes
    fmt: str | None
    future: asyncio.Future = field(repr=False)


class TranscodeQueue:
    """Single-consumer FIFO that decodes at most one recording at a time.

    Args:
        processor: PCM helper used to convert decoded samples to float32.
    """

    def __init__(self, processor: AudioProcessor | None = None) -> None:
        self._processor = processor or AudioProcessor(sample_rate=TARGET_SAMPLE_RATE)
        self._queue: asyncio.Queue[TranscodeJob | None] = asyncio.Queue()
        self._worker: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        """Launch the worker task (idempotent)."""
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="transcode-worker")
        logger.info("Transcode worker started")

    async def stop(self) -> None:
        """Let queued jobs finish, then stop the worker."""
        if not self.running:
            return
        await self._queue.put(None)
        await self._worker
        self._worker = None
        logger.info("Transcode worker stopped")

    async def submit(self, data: bytes, fmt: str | None = None) -> np.ndarray:
        """Enqueue ``data`` and wait for its 16 kHz mono float32 samples.

        Raises:
            TranscodingError: If the payload cannot be decoded.
        """
        if not self.running:
            self.start()
        future = asyncio.get_running_loop().create_future()
        await self._queue.put(TranscodeJob(data=data, fmt=fmt, future=future))
        return await future

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                if job is None:
                    return
                if job.future.cancelled():
                    continue
                try:
                    samples = await asyncio.to_thread(self.decode, job.data, job.fmt)
                except Exception as exc:
                    logger.warning("Transcoding failed (fmt=%s): %s", job.fmt, exc)
                    if not job.future.cancelled():
                        job.future.set_exception(TranscodingError(f"Audio transcoding failed: {exc}"))
                else:
                    if not job.future.cancelled():
                        job.future.set_result(samples)
            finally:
                self._queue.task_done()

    def decode(self, data: bytes, fmt: str | None = None) -> np.ndarray:
        """Decode any ffmpeg-readable payload to 16 kHz mono float32 (blocking)."""
        segment = AudioSegment.from_file(io.BytesIO(data), format=fmt)
        segment = (
            segment.set_frame_rate(TARGET_SAMPLE_RATE)
            .set_channels(1)
            .set_sample_width(self._processor.sample_width)
        )
        return self._processor.pcm_to_ndarray(segment.raw_data)
