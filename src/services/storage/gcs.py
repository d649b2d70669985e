"""Google Cloud Storage archive for review recordings.

Objects are written with a long cache lifetime and then made private; the
locator returned to the pipeline is the ``gs://bucket/object`` URI.
"""

import asyncio
import json
import logging

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage
from google.oauth2 import service_account

from src.core.config import get_settings
from src.core.exceptions import StorageError
from src.services.storage.base import BaseObjectStore

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"


class GcsObjectStore(BaseObjectStore):
    """Object storage backed by a single GCS bucket.

    Args:
        bucket_name: Target bucket (defaults to ``settings.gcp_audio_bucket``).
        credentials_json: Inline service-account JSON; empty means the
            ambient Application Default Credentials.
        client: Optional pre-built ``storage.Client`` (tests).
    """

    def __init__(
        self,
        bucket_name: str | None = None,
        credentials_json: str | None = None,
        client: storage.Client | None = None,
    ) -> None:
        settings = get_settings()
        self._bucket_name = bucket_name or settings.gcp_audio_bucket
        self._credentials_json = (
            credentials_json
            if credentials_json is not None
            else settings.google_application_credentials_json
        )
        self._client = client

    def _get_client(self) -> storage.Client:
        """Return the storage client, building it on first use."""
        if self._client is None:
            if self._credentials_json:
                info = json.loads(self._credentials_json)
                credentials = service_account.Credentials.from_service_account_info(info)
                self._client = storage.Client(project=info.get("project_id"), credentials=credentials)
            else:
                self._client = storage.Client()
        return self._client

    def _store_sync(self, object_name: str, data: bytes, content_type: str) -> str:
        try:
            bucket = self._get_client().bucket(self._bucket_name)
            blob = bucket.blob(object_name)
            blob.cache_control = CACHE_CONTROL
            blob.upload_from_string(data, content_type=content_type)
        except (GoogleAPIError, GoogleAuthError, ValueError, OSError) as exc:
            raise StorageError(f"Failed to upload {object_name}: {exc}") from exc

        try:
            blob.make_private()
        except (GoogleAPIError, GoogleAuthError, OSError) as exc:
            logger.warning("Could not make %s private automatically: %s", object_name, exc)

        return f"gs://{self._bucket_name}/{object_name}"

    async def store(self, object_name: str, data: bytes, content_type: str) -> str:
        """Upload ``data`` in a worker thread and return its ``gs://`` URI."""
        if not data:
            raise StorageError("Audio payload for upload was empty.")
        return await asyncio.to_thread(self._store_sync, object_name, data, content_type)
