"""
Abstract storage ports used by the review pipeline.

``BaseObjectStore`` archives raw recordings; ``BaseTableStore`` appends the
final review row. The ``Null*`` variants stand in when the corresponding
Google resource is not configured.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

logger = logging.getLogger(__name__)


class BaseObjectStore(ABC):
    """Durable object storage for uploaded recordings."""

    @abstractmethod
    async def store(self, object_name: str, data: bytes, content_type: str) -> str:
        """Persist ``data`` under ``object_name`` and restrict public access.

        Args:
            object_name: Deterministic, filesystem-safe object key.
            data: Raw audio payload.
            content_type: MIME type recorded on the object.

        Returns:
            A locator for the stored object, ``""`` when nothing was stored.

        Raises:
            StorageError: When the write itself fails.
        """


class BaseTableStore(ABC):
    """Append-only tabular store (one row per review)."""

    @abstractmethod
    async def append_row(self, values: Sequence[str | int | float]) -> None:
        """Append one row.

        Raises:
            PersistenceError: When the store is unreachable or rejects the row.
        """


class NullObjectStore(BaseObjectStore):
    """Archives nothing; every call logs a warning and returns ``""``."""

    async def store(self, object_name: str, data: bytes, content_type: str) -> str:
        logger.warning("GCP_AUDIO_BUCKET is not configured; %s was not archived", object_name)
        return ""


class NullTableStore(BaseTableStore):
    """Drops rows with a warning when the spreadsheet is not configured."""

    def __init__(self, reason: str = "GOOGLE_SHEETS_ID is not configured") -> None:
        self._reason = reason

    async def append_row(self, values: Sequence[str | int | float]) -> None:
        logger.warning("%s; review row for %s was not sent", self._reason, values[0] if values else "?")
