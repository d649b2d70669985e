"""Tests for the STT providers and their factory.

The Gemini provider is exercised against ``httpx.MockTransport``; the Whisper
provider with its model and transcode queue mocked out.
"""

import base64
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import numpy as np
import pytest

from src.core.exceptions import TranscodingError, TranscriptionError
from src.services.audio.transcoder import TranscodeQueue
from src.services.transcription import NullTranscriber, create_transcriber
from src.services.transcription.gemini import GeminiTranscriber
from src.services.transcription.whisper import WhisperTranscriber, format_from_content_type


def _gemini(handler) -> GeminiTranscriber:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiTranscriber(
        api_key="test-key",
        model="gemini-test",
        base_url="https://gemini.example/v1beta",
        client=client,
    )


class TestGeminiTranscriber:
    async def test_sends_inline_audio_and_prompt(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "  Halo direksi.  "}]}}]},
            )

        text = await _gemini(handler).transcribe(b"webm-bytes", "id", content_type="audio/webm")

        assert text == "Halo direksi."
        assert seen["url"].path == "/v1beta/models/gemini-test:generateContent"
        assert seen["url"].params["key"] == "test-key"
        parts = seen["body"]["contents"][0]["parts"]
        assert "Indonesian" in parts[0]["text"]
        assert parts[1]["inline_data"]["mime_type"] == "audio/webm"
        assert base64.b64decode(parts[1]["inline_data"]["data"]) == b"webm-bytes"

    async def test_missing_candidates_gives_empty_text(self):
        transcriber = _gemini(lambda request: httpx.Response(200, json={"candidates": []}))
        assert await transcriber.transcribe(b"audio", "id") == ""

    async def test_http_error_raises(self):
        transcriber = _gemini(lambda request: httpx.Response(503, text="overloaded"))
        with pytest.raises(TranscriptionError):
            await transcriber.transcribe(b"audio", "id")

    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TranscriptionError):
            await _gemini(handler).transcribe(b"audio", "id")

    async def test_empty_audio_rejected(self):
        transcriber = _gemini(lambda request: httpx.Response(200, json={}))
        with pytest.raises(TranscriptionError):
            await transcriber.transcribe(b"", "id")


class TestWhisperTranscriber:
    @pytest.fixture
    def queue(self):
        q = AsyncMock(spec=TranscodeQueue)
        q.submit.return_value = np.full(16000, 0.3, dtype=np.float32)
        return q

    async def test_transcribes_decoded_samples(self, queue):
        transcriber = WhisperTranscriber(transcode_queue=queue, model_size="tiny")
        with patch.object(transcriber, "_run_transcription", return_value="Sistem sudah baik.") as run:
            text = await transcriber.transcribe(b"audio", "id", content_type="audio/webm;codecs=opus")

        assert text == "Sistem sudah baik."
        queue.submit.assert_awaited_once_with(b"audio", fmt="webm")
        assert run.call_args.args[1] == "id"

    async def test_silent_audio_skips_model(self, queue):
        queue.submit.return_value = np.zeros(16000, dtype=np.float32)
        transcriber = WhisperTranscriber(transcode_queue=queue)
        with patch.object(transcriber, "_run_transcription") as run:
            assert await transcriber.transcribe(b"audio", "id") == ""
        run.assert_not_called()

    async def test_transcoding_error_propagates(self, queue):
        queue.submit.side_effect = TranscodingError("bad container")
        transcriber = WhisperTranscriber(transcode_queue=queue)
        with pytest.raises(TranscriptionError):
            await transcriber.transcribe(b"audio", "id")

    def test_run_transcription_joins_segments(self, queue):
        model = MagicMock()
        model.transcribe.return_value = (
            iter([MagicMock(text=" Satu. "), MagicMock(text="  "), MagicMock(text="Dua.")]),
            MagicMock(),
        )
        transcriber = WhisperTranscriber(transcode_queue=queue)
        with patch.object(transcriber, "_get_model", return_value=model):
            assert transcriber._run_transcription(np.zeros(10, dtype=np.float32), "id") == "Satu. Dua."

    @pytest.mark.parametrize(
        ("content_type", "expected"),
        [("audio/webm;codecs=opus", "webm"), ("audio/x-wav", "wav"), ("audio/mpeg", "mp3"), ("", None), (None, None)],
    )
    def test_format_from_content_type(self, content_type, expected):
        assert format_from_content_type(content_type) == expected


class TestFactory:
    def test_gemini_without_key_is_null(self):
        with patch("src.core.config.get_settings") as get_settings:
            get_settings.return_value.gemini_api_key = ""
            assert isinstance(create_transcriber("gemini"), NullTranscriber)

    def test_gemini_with_key(self):
        assert isinstance(create_transcriber("gemini", api_key="k"), GeminiTranscriber)

    def test_whisper(self):
        transcriber = create_transcriber("whisper", transcode_queue=TranscodeQueue())
        assert isinstance(transcriber, WhisperTranscriber)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown STT provider"):
            create_transcriber("deepgram")

    async def test_null_transcriber_returns_empty(self):
        assert await NullTranscriber().transcribe(b"audio", "id", label="Saran untuk Sistem") == ""
