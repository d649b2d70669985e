"""
Microphone capture port and its implementations.

``BaseMicrophone.acquire()`` opens an audio source and returns a
``CaptureSession``; ``stop()`` hands back the recording as a WAV payload.
``close()`` must always be called to release the source; it is idempotent.

Two backends:

- ``BrowserMicrophone`` (default): the reviewer's browser records through
  ``st.audio_input`` and the finished WAV is delivered to the microphone,
  so audio always comes from the client device.
- ``SoundDeviceMicrophone``: PortAudio input on the machine running the
  wizard, for kiosk-style local use.
"""

import logging
import threading
from abc import ABC, abstractmethod

import numpy as np

from src.core.config import Settings, get_settings
from src.core.exceptions import DeviceUnavailable, PermissionDenied
from src.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)

CAPTURE_CONTENT_TYPE = "audio/wav"


class CaptureSession(ABC):
    """An exclusively held, running audio input."""

    @abstractmethod
    def stop(self) -> bytes:
        """Stop capturing and return the buffered audio as WAV bytes."""

    @abstractmethod
    def close(self) -> None:
        """Release the device without producing audio (idempotent)."""


class BaseMicrophone(ABC):
    """Permission-gated audio input."""

    @abstractmethod
    def acquire(self) -> CaptureSession:
        """Open the device and start buffering.

        Raises:
            PermissionDenied: Access to the microphone was refused.
            DeviceUnavailable: No usable input device.
        """


# ---------------------------------------------------------------------------
# Browser capture (st.audio_input)
# ---------------------------------------------------------------------------


class BufferedCapture(CaptureSession):
    """Session over a recording that already finished in the browser."""

    def __init__(self, data: bytes) -> None:
        self._data: bytes | None = data

    def stop(self) -> bytes:
        data, self._data = self._data, None
        return data or b""

    def close(self) -> None:
        self._data = None


class BrowserMicrophone(BaseMicrophone):
    """Audio recorded client-side by the ``st.audio_input`` widget.

    The widget owns the browser's permission prompt and record/stop
    controls; each finished recording is passed to ``deliver()`` and picked
    up by the next ``acquire()``.
    """

    def __init__(self) -> None:
        self._pending: bytes | None = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def deliver(self, data: bytes) -> None:
        """Queue the browser's WAV payload for the next acquisition."""
        self._pending = data

    def acquire(self) -> CaptureSession:
        data, self._pending = self._pending, None
        if data is None:
            raise DeviceUnavailable("Belum ada rekaman dari browser.")
        return BufferedCapture(data)


# ---------------------------------------------------------------------------
# Local capture (sounddevice)
# ---------------------------------------------------------------------------


class SoundDeviceCapture(CaptureSession):
    """Buffers float32 blocks delivered by a ``sounddevice.InputStream``."""

    def __init__(self, stream, processor: AudioProcessor) -> None:
        self._stream = stream
        self._processor = processor
        self._chunks: list[np.ndarray] = []
        self._lock = threading.Lock()

    def on_audio(self, indata, frames, time_info, status) -> None:  # noqa: ARG002
        """PortAudio callback; runs on the audio thread."""
        if status:
            logger.debug("Input stream status: %s", status)
        with self._lock:
            self._chunks.append(indata.copy())

    def stop(self) -> bytes:
        self.close()
        with self._lock:
            chunks, self._chunks = self._chunks, []
        if not chunks:
            return b""
        return self._processor.ndarray_to_wav(np.concatenate(chunks, axis=0))

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()


def _map_portaudio_error(exc: Exception) -> Exception:
    message = str(exc).lower()
    if "permission" in message or "denied" in message:
        return PermissionDenied()
    return DeviceUnavailable()


class SoundDeviceMicrophone(BaseMicrophone):
    """Local input device via PortAudio.

    Args:
        sample_rate: Capture rate in Hz.
        channels: Number of input channels.
        device: PortAudio device index or name (None = system default).
    """

    def __init__(self, sample_rate: int = 16000, channels: int = 1, device: int | str | None = None) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._device = device
        self._processor = AudioProcessor(sample_rate=sample_rate, channels=channels)

    def acquire(self) -> CaptureSession:
        try:
            import sounddevice as sd
        except (ImportError, OSError) as exc:
            raise DeviceUnavailable("Perangkat perekam audio tidak didukung di sistem ini.") from exc

        try:
            sd.query_devices(self._device, kind="input")
        except (ValueError, sd.PortAudioError) as exc:
            raise DeviceUnavailable() from exc

        capture = SoundDeviceCapture(None, self._processor)
        try:
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="float32",
                callback=capture.on_audio,
                device=self._device,
            )
        except sd.PortAudioError as exc:
            raise _map_portaudio_error(exc) from exc

        try:
            stream.start()
        except sd.PortAudioError as exc:
            # The device is already open at this point.
            stream.close()
            raise _map_portaudio_error(exc) from exc

        capture._stream = stream
        logger.info("Microphone acquired (device=%s, rate=%s)", self._device, self._sample_rate)
        return capture


def create_microphone(settings: Settings | None = None) -> BaseMicrophone:
    """Return the capture backend named by ``settings.microphone_backend``.

    Raises:
        ValueError: If the backend is unknown.
    """
    settings = settings or get_settings()
    backend = settings.microphone_backend
    if backend == "browser":
        return BrowserMicrophone()
    if backend == "local":
        return SoundDeviceMicrophone()
    raise ValueError(f"Unknown microphone backend: {backend}")
