"""Tests for the wizard's synchronous backend client.

Requests go through ``httpx.MockTransport`` so the multipart body and the
error-to-message mapping can be asserted without a server.
"""

import httpx
import pytest

from src.core.models import NominationCategory, RecordingSlot
from src.ui.api_client import SUBMIT_FAILED_MESSAGE, APIClient, APIError, upload_filename
from src.ui.recorder import CapturedAudio
from src.ui.wizard import ReviewDraft


@pytest.fixture
def draft(tmp_path):
    d = ReviewDraft(subject_name="Budi", period="Maret", score=9)
    d.nominations = {
        NominationCategory.best_performance: "Ayu",
        NominationCategory.most_discipline: "Citra",
        NominationCategory.most_improved: "Dimas",
    }
    d.recordings = {
        RecordingSlot.directors: CapturedAudio.create(b"RIFF-directors", tmp_path),
        RecordingSlot.system: CapturedAudio.create(b"RIFF-system", tmp_path),
    }
    return d


def _client(handler) -> APIClient:
    return APIClient(base_url="http://backend.test", transport=httpx.MockTransport(handler))


def test_upload_filename(draft):
    assert upload_filename(draft, "saran_direksi") == "budi_maret_saran_direksi.wav"


def test_submit_review_sends_multipart(draft):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.read()
        return httpx.Response(200, json={"message": "Review berhasil diproses."})

    message = _client(handler).submit_review(draft)

    assert message == "Review berhasil diproses."
    assert seen["path"] == "/api/reviews"
    assert seen["content_type"].startswith("multipart/form-data")
    body = seen["body"]
    for fragment in (
        b'name="name"',
        b"Budi",
        b'name="score"',
        b'name="bestPerformance"',
        b'name="mostDiscipline"',
        b'name="mostImproved"',
        b'name="audioDirectors"; filename="budi_maret_saran_direksi.wav"',
        b'name="audioSystem"; filename="budi_maret_saran_sistem.wav"',
        b"RIFF-directors",
        b"RIFF-system",
    ):
        assert fragment in body


def test_rejected_submission_uses_generic_message(draft):
    client = _client(lambda request: httpx.Response(400, json={"error": "Seluruh nominasi wajib diisi."}))
    with pytest.raises(APIError) as exc_info:
        client.submit_review(draft)
    assert exc_info.value.message == SUBMIT_FAILED_MESSAGE
    assert exc_info.value.category == "http"


def test_non_json_error_uses_generic_message(draft):
    client = _client(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))
    with pytest.raises(APIError) as exc_info:
        client.submit_review(draft)
    assert exc_info.value.message == SUBMIT_FAILED_MESSAGE


def test_connection_error(draft):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(APIError) as exc_info:
        _client(handler).submit_review(draft)
    assert exc_info.value.category == "connection"


def test_check_connection():
    ok, message = _client(lambda request: httpx.Response(200, json={"status": "ok"})).check_connection()
    assert ok
    assert message == "Terhubung"


def test_check_connection_reports_unreachable_server():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    ok, message = _client(handler).check_connection()
    assert not ok
    assert message == "Server tidak dapat dihubungi. Pastikan backend berjalan."
