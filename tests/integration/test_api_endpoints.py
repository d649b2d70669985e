"""Integration tests for the REST API.

The app is built with ``create_app(pipeline=...)`` around mock ports, so
the full request path (multipart parsing, validation, pipeline, error
envelope) runs without Google services.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.routes.reviews import get_review_pipeline
from src.core.exceptions import PersistenceError
from src.services.review_pipeline import ReviewPipeline


@pytest.fixture
def pipeline(mock_transcriber, mock_object_store, mock_table_store):
    return ReviewPipeline(mock_transcriber, mock_object_store, mock_table_store)


@pytest.fixture
async def client(pipeline):
    app = create_app(pipeline=pipeline)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def audio_files():
    return {
        "audioDirectors": ("budi_maret_saran_direksi.webm", b"directors-audio", "audio/webm"),
        "audioSystem": ("budi_maret_saran_sistem.webm", b"system-audio", "audio/webm"),
    }


# ---------------------------------------------------------------------------
# Health / static
# ---------------------------------------------------------------------------


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert "timestamp" in body


async def test_landing_page_served(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]


async def test_unknown_path_falls_back_to_index(client):
    resp = await client.get("/review/anything?name=Budi")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]


async def test_landing_page_points_at_configured_wizard(client, monkeypatch):
    from src.core.config import get_settings

    monkeypatch.setattr(get_settings(), "wizard_url", "https://review.example.com")

    resp = await client.get("/")

    assert 'content="https://review.example.com"' in resp.text
    assert 'href="https://review.example.com"' in resp.text
    assert "localhost:8501" not in resp.text
    assert "{{WIZARD_URL}}" not in resp.text


async def test_index_html_path_is_rendered_too(client):
    resp = await client.get("/index.html")
    assert "{{WIZARD_URL}}" not in resp.text


def test_main_runs_uvicorn_on_configured_address(monkeypatch):
    from unittest.mock import MagicMock

    from src.api import app as app_module
    from src.core.config import get_settings

    run = MagicMock()
    monkeypatch.setattr(app_module.uvicorn, "run", run)
    monkeypatch.setattr(get_settings(), "app_port", 3100)

    app_module.main()

    run.assert_called_once_with("src.api.app:app", host=get_settings().app_host, port=3100)


async def test_openapi_documents_error_envelope(client):
    resp = await client.get("/openapi.json")
    responses = resp.json()["paths"]["/api/reviews"]["post"]["responses"]

    for status in ("400", "500"):
        schema = responses[status]["content"]["application/json"]["schema"]
        assert schema["$ref"].endswith("/ErrorResponse")


# ---------------------------------------------------------------------------
# POST /api/reviews
# ---------------------------------------------------------------------------


async def test_submit_review_success(client, review_form, audio_files, mock_table_store, mock_object_store):
    resp = await client.post("/api/reviews", data=review_form, files=audio_files)

    assert resp.status_code == 200
    assert resp.json() == {"message": "Review berhasil diproses."}

    row = mock_table_store.append_row.await_args.args[0]
    assert row[:6] == ["Budi", "Maret", 8, "Ayu", "Citra", "Dimas"]
    assert row[8] == "gs://reviews/budi_maret_saran_direksi.webm"
    archived = {call.args[0]: call.args[1] for call in mock_object_store.store.await_args_list}
    assert archived["budi_maret_saran_sistem.webm"] == b"system-audio"


async def test_missing_nomination_is_rejected(
    client, review_form, audio_files, mock_table_store, mock_transcriber, mock_object_store
):
    review_form["mostImproved"] = ""

    resp = await client.post("/api/reviews", data=review_form, files=audio_files)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Seluruh nominasi wajib diisi."
    mock_transcriber.transcribe.assert_not_awaited()
    mock_object_store.store.assert_not_awaited()
    mock_table_store.append_row.assert_not_awaited()


async def test_missing_identity_is_rejected(client, review_form, audio_files):
    del review_form["name"]
    resp = await client.post("/api/reviews", data=review_form, files=audio_files)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Data review tidak lengkap."


async def test_missing_audio_is_rejected(client, review_form, audio_files):
    del audio_files["audioSystem"]
    resp = await client.post("/api/reviews", data=review_form, files=audio_files)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Rekaman audio wajib diunggah."


async def test_oversize_audio_is_rejected(client, review_form, audio_files, monkeypatch):
    from src.core.config import get_settings

    monkeypatch.setattr(get_settings(), "max_audio_bytes", 8)
    resp = await client.post("/api/reviews", data=review_form, files=audio_files)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Ukuran rekaman audio melebihi 20 MB."


async def test_transcription_failure_still_succeeds(client, review_form, audio_files, mock_transcriber, mock_table_store):
    mock_transcriber.transcribe.side_effect = RuntimeError("provider down")

    resp = await client.post("/api/reviews", data=review_form, files=audio_files)

    assert resp.status_code == 200
    row = mock_table_store.append_row.await_args.args[0]
    assert row[6] == ""
    assert row[7] == ""


async def test_append_failure_returns_500(client, review_form, audio_files, mock_table_store):
    mock_table_store.append_row.side_effect = PersistenceError("sheet unavailable")

    resp = await client.post("/api/reviews", data=review_form, files=audio_files)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Terjadi kesalahan pada server."


async def test_pipeline_dependency_can_be_overridden(review_form, audio_files, mock_transcriber, mock_object_store):
    from unittest.mock import AsyncMock

    from src.services.storage.base import BaseTableStore

    table = AsyncMock(spec=BaseTableStore)
    app = create_app()
    app.dependency_overrides[get_review_pipeline] = lambda: ReviewPipeline(mock_transcriber, mock_object_store, table)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.post("/api/reviews", data=review_form, files=audio_files)

    assert resp.status_code == 200
    table.append_row.assert_awaited_once()
