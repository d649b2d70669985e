"""
Vocal Review exception hierarchy.

All application-specific exceptions inherit from VocalReviewError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class VocalReviewError(Exception):
    """Base exception for all Vocal Review errors."""

    def __init__(
        self,
        detail: str = "Terjadi kesalahan pada server.",
        code: str = "VOCAL_REVIEW_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class ReviewValidationError(VocalReviewError):
    """Raised when a submitted review is incomplete or malformed."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            detail=detail,
            code="REVIEW_INVALID",
            status_code=400,
        )


class PersistenceError(VocalReviewError):
    """Raised when the review row cannot be appended to the spreadsheet."""

    def __init__(self, detail: str = "Failed to append review row") -> None:
        super().__init__(
            detail=detail,
            code="PERSISTENCE_ERROR",
            status_code=500,
        )


class TranscriptionError(VocalReviewError):
    """Raised when STT processing fails."""

    def __init__(self, detail: str = "Transcription failed") -> None:
        super().__init__(
            detail=detail,
            code="TRANSCRIPTION_ERROR",
            status_code=500,
        )


class TranscodingError(TranscriptionError):
    """Raised when an uploaded recording cannot be decoded to PCM."""

    def __init__(self, detail: str = "Audio transcoding failed") -> None:
        super().__init__(detail=detail)
        self.code = "TRANSCODING_ERROR"


class StorageError(VocalReviewError):
    """Raised when a recording cannot be archived to object storage."""

    def __init__(self, detail: str = "Audio archival failed") -> None:
        super().__init__(
            detail=detail,
            code="STORAGE_ERROR",
            status_code=500,
        )


# ---------------------------------------------------------------------------
# Wizard-side (microphone / recorder) errors
# ---------------------------------------------------------------------------


class RecordingError(VocalReviewError):
    """Base class for microphone capture failures shown to the user."""

    def __init__(
        self,
        detail: str = "Tidak dapat mengakses mikrofon. Mohon cek pengaturan browser.",
        code: str = "RECORDING_ERROR",
    ) -> None:
        super().__init__(detail=detail, code=code, status_code=500)


class PermissionDenied(RecordingError):
    """Raised when access to the microphone is refused."""

    def __init__(self, detail: str = "Izin mikrofon ditolak.") -> None:
        super().__init__(detail=detail, code="PERMISSION_DENIED")


class DeviceUnavailable(RecordingError):
    """Raised when no usable input device exists or it cannot be opened."""

    def __init__(self, detail: str = "Perangkat mikrofon tidak tersedia.") -> None:
        super().__init__(detail=detail, code="DEVICE_UNAVAILABLE")


class RecorderStateError(RecordingError):
    """Raised for recorder operations that are invalid in the current state."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="RECORDER_STATE")
