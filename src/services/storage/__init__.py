"""
Storage module - recording archive and review sheet adapters.

Factory functions pick the Google-backed adapter when it is configured and
fall back to the logging ``Null*`` stores otherwise.
"""

from src.core.config import Settings, get_settings
from src.services.storage.base import (
    BaseObjectStore,
    BaseTableStore,
    NullObjectStore,
    NullTableStore,
)

__all__ = [
    "BaseObjectStore",
    "BaseTableStore",
    "NullObjectStore",
    "NullTableStore",
    "create_object_store",
    "create_table_store",
]


def create_object_store(settings: Settings | None = None) -> BaseObjectStore:
    """Return a GCS store when a bucket is configured, else ``NullObjectStore``."""
    settings = settings or get_settings()
    if not settings.gcp_audio_bucket:
        return NullObjectStore()
    from src.services.storage.gcs import GcsObjectStore

    return GcsObjectStore(
        bucket_name=settings.gcp_audio_bucket,
        credentials_json=settings.google_application_credentials_json,
    )


def create_table_store(settings: Settings | None = None) -> BaseTableStore:
    """Return the Sheets store when fully configured, else ``NullTableStore``."""
    settings = settings or get_settings()
    if not settings.google_sheets_id:
        return NullTableStore()
    if not settings.google_service_account_email or not settings.google_service_account_key:
        return NullTableStore("Google service account credentials are incomplete")
    from src.services.storage.sheets import SheetsTableStore

    return SheetsTableStore(
        spreadsheet_id=settings.google_sheets_id,
        client_email=settings.google_service_account_email,
        private_key=settings.service_account_private_key,
        value_range=settings.google_sheets_range,
    )
