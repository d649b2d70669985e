"""
Synchronous HTTP client for the Vocal Review backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging

import httpx
import streamlit as st

from src.core.models import NOMINATION_LABELS, SLOT_SPECS
from src.ui.wizard import ReviewDraft

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Gagal mengirim data, silakan coba lagi."


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "http", "network", "unknown".
    Used by the UI to display appropriate error messages.
    """

    def __init__(self, message: str, category: str = "unknown") -> None:
        self.message = message
        self.category = category
        super().__init__(message)


def upload_filename(draft: ReviewDraft, archive_label: str) -> str:
    """Filename sent with a recording, e.g. ``budi_maret_saran_direksi.wav``."""
    return f"{draft.subject_name.lower()}_{draft.period.lower()}_{archive_label}.wav"


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    All methods return parsed JSON or raise ``APIError`` with messages
    ready to show in the wizard.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 180.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self._base_url, timeout=timeout, transport=transport)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Server tidak dapat dihubungi. Pastikan backend berjalan.",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Permintaan melewati batas waktu. Silakan coba lagi.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("error", exc.response.text)
            except (ValueError, AttributeError):
                detail = exc.response.text
            logger.warning("Backend returned %s: %s", exc.response.status_code, detail)
            raise APIError(SUBMIT_FAILED_MESSAGE, category="http") from None
        except httpx.HTTPError as exc:
            logger.warning("Network error calling %s: %s", path, exc)
            raise APIError(SUBMIT_FAILED_MESSAGE, category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Terhubung"
        except APIError as exc:
            return False, exc.message

    # -- reviews --

    def submit_review(self, draft: ReviewDraft) -> str:
        """POST the draft as multipart form data; returns the server message."""
        data = {
            "name": draft.subject_name,
            "month": draft.period,
            "score": str(draft.score) if draft.score is not None else "",
        }
        for category in NOMINATION_LABELS:
            data[category.value] = draft.nominations.get(category, "")

        files = {}
        for slot, spec in SLOT_SPECS.items():
            captured = draft.recordings.get(slot)
            if captured is None:
                continue
            files[spec.form_field] = (
                upload_filename(draft, spec.archive_label),
                captured.data,
                captured.content_type,
            )

        logger.info("Submitting review for %s (%s)", draft.subject_name, draft.period)
        return self._request("post", "/api/reviews", data=data, files=files).json().get("message", "")

    def close(self) -> None:
        self._client.close()


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:3000") -> APIClient:
    """Return a cached APIClient, keyed by base_url."""
    return APIClient(base_url=base_url)
