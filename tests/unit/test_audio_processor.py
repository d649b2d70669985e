"""Tests for AudioProcessor (PCM conversion, WAV encoding and silence detection).

Validates that raw PCM bytes are correctly converted to normalised float32
numpy arrays, that captured samples encode to a readable WAV payload and
that silence detection works for empty and quiet audio.
"""

import io

import numpy as np
import pytest
import soundfile as sf

from src.services.audio.processor import AudioProcessor


@pytest.fixture
def processor():
    """Create an AudioProcessor configured for 16 kHz, 16-bit mono audio."""
    return AudioProcessor(sample_rate=16000, sample_width=2, channels=1)


class TestPcmToNdarray:
    """Verify PCM-to-ndarray conversion produces valid float32 samples."""

    def test_converts_pcm_to_float32(self, processor, sample_pcm_bytes):
        result = processor.pcm_to_ndarray(sample_pcm_bytes)
        assert result.dtype == np.float32
        assert len(result) == 16000

    def test_output_range(self, processor, sample_pcm_bytes):
        """Normalised samples fall within [-1.0, 1.0]."""
        result = processor.pcm_to_ndarray(sample_pcm_bytes)
        assert result.max() <= 1.0
        assert result.min() >= -1.0

    def test_rejects_misaligned_data(self, processor):
        with pytest.raises(ValueError, match="not aligned"):
            processor.pcm_to_ndarray(b"\x00\x00\x00")


class TestNdarrayToWav:
    def test_round_trips_through_soundfile(self, processor):
        tone = (0.25 * np.sin(np.linspace(0, 200, 1600))).astype(np.float32)

        payload = processor.ndarray_to_wav(tone)

        data, rate = sf.read(io.BytesIO(payload), dtype="float32")
        assert payload[:4] == b"RIFF"
        assert rate == 16000
        assert len(data) == 1600

    def test_accepts_frames_by_channels(self, processor):
        block = np.zeros((320, 1), dtype=np.float32)
        assert processor.ndarray_to_wav(block)[:4] == b"RIFF"

    def test_empty_audio_rejected(self, processor):
        with pytest.raises(ValueError):
            processor.ndarray_to_wav(np.array([], dtype=np.float32))


class TestIsSilent:
    def test_silence_detected(self, processor):
        assert processor.is_silent(np.zeros(16000, dtype=np.float32))

    def test_empty_audio_is_silent(self, processor):
        assert processor.is_silent(np.array([], dtype=np.float32))

    def test_tone_is_not_silent(self, processor, sample_pcm_bytes):
        assert not processor.is_silent(processor.pcm_to_ndarray(sample_pcm_bytes))

    def test_custom_threshold(self, processor):
        quiet = np.full(16000, 0.005, dtype=np.float32)
        assert processor.is_silent(quiet)
        assert not processor.is_silent(quiet, threshold=0.001)
