"""Shared pytest fixtures for the Vocal Review test suite.

Provides mock transcription / storage ports, sample audio payloads and an
in-memory microphone used by the wizard tests.
"""

import io
import math
import struct
from unittest.mock import AsyncMock

import numpy as np
import pytest
import soundfile as sf

from src.core.models import AudioUpload, NominationCategory, RecordingSlot
from src.ui.microphone import BaseMicrophone, CaptureSession

# ---------------------------------------------------------------------------
# Pipeline port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_transcriber():
    """Mock STT provider returning a fixed transcript per call."""
    from src.services.transcription.base import BaseTranscriber

    transcriber = AsyncMock(spec=BaseTranscriber)
    transcriber.transcribe.return_value = "Tolong tambah pelatihan."
    return transcriber


@pytest.fixture
def mock_object_store():
    """Mock archive returning a gs:// locator built from the object name."""
    from src.services.storage.base import BaseObjectStore

    store = AsyncMock(spec=BaseObjectStore)
    store.store.side_effect = lambda name, data, content_type: f"gs://reviews/{name}"
    return store


@pytest.fixture
def mock_table_store():
    from src.services.storage.base import BaseTableStore

    return AsyncMock(spec=BaseTableStore)


# ---------------------------------------------------------------------------
# Audio fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono)."""
    sample_rate = 16000
    amplitude = 16000
    samples = [
        struct.pack("<h", int(amplitude * math.sin(2 * math.pi * 440.0 * i / sample_rate)))
        for i in range(sample_rate)
    ]
    return b"".join(samples)


@pytest.fixture
def sample_wav_bytes():
    """Half a second of 440Hz tone encoded as a 16-bit WAV file."""
    t = np.arange(8000, dtype=np.float32) / 16000
    tone = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    buffer = io.BytesIO()
    sf.write(buffer, tone, 16000, format="WAV", subtype="PCM_16")
    return buffer.getvalue()


@pytest.fixture
def review_form():
    """A complete, valid multipart body (form fields only)."""
    return {
        "name": "Budi",
        "month": "Maret",
        "score": "8",
        "bestPerformance": "Ayu",
        "mostDiscipline": "Citra",
        "mostImproved": "Dimas",
    }


@pytest.fixture
def review_uploads():
    """Both recordings as pipeline-ready uploads."""
    return {
        RecordingSlot.directors: AudioUpload(
            slot=RecordingSlot.directors, data=b"directors-audio", filename="budi_maret_saran_direksi.webm"
        ),
        RecordingSlot.system: AudioUpload(
            slot=RecordingSlot.system, data=b"system-audio", filename="budi_maret_saran_sistem.webm"
        ),
    }


@pytest.fixture
def review_nominations():
    return {
        NominationCategory.best_performance: "Ayu",
        NominationCategory.most_discipline: "Citra",
        NominationCategory.most_improved: "Dimas",
    }


# ---------------------------------------------------------------------------
# Microphone fixtures
# ---------------------------------------------------------------------------


class FakeCapture(CaptureSession):
    """Capture session that yields a fixed payload and tracks release."""

    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self.closed = False
        self.close_calls = 0

    def stop(self) -> bytes:
        self.closed = True
        return self.payload

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class FakeMicrophone(BaseMicrophone):
    """In-memory microphone.

    ``error`` is raised from ``acquire``; ``on_acquire`` runs while the
    recorder is in the requesting state.
    """

    def __init__(self, payload: bytes = b"RIFF-fake-wav") -> None:
        self.payload = payload
        self.error: Exception | None = None
        self.on_acquire = None
        self.sessions: list[FakeCapture] = []

    def acquire(self) -> CaptureSession:
        if self.on_acquire is not None:
            self.on_acquire()
        if self.error is not None:
            raise self.error
        session = FakeCapture(self.payload)
        self.sessions.append(session)
        return session


@pytest.fixture
def fake_microphone():
    return FakeMicrophone()
