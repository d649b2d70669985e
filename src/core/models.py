"""
Pydantic v2 request / response models used across the API and wizard.

Health, review submission (validated form + audio parts), the persisted
review row, and the enums shared by the wizard engine and the pipeline.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Shared enums
# ---------------------------------------------------------------------------


class NominationCategory(StrEnum):
    """Peer nomination categories; values double as multipart field names."""

    best_performance = "bestPerformance"
    most_discipline = "mostDiscipline"
    most_improved = "mostImproved"


NOMINATION_LABELS: dict[NominationCategory, str] = {
    NominationCategory.best_performance: "Best Performance",
    NominationCategory.most_discipline: "Most Discipline",
    NominationCategory.most_improved: "Most Improved",
}


class RecordingSlot(StrEnum):
    """The two fixed voice-feedback targets."""

    directors = "directors"
    system = "system"


class SlotSpec(BaseModel):
    """Wire and archive naming for one recording slot."""

    form_field: str
    archive_label: str
    description: str


SLOT_SPECS: dict[RecordingSlot, SlotSpec] = {
    RecordingSlot.directors: SlotSpec(
        form_field="audioDirectors",
        archive_label="saran_direksi",
        description="Saran untuk Direksi",
    ),
    RecordingSlot.system: SlotSpec(
        form_field="audioSystem",
        archive_label="saran_sistem",
        description="Saran untuk Sistem",
    ),
}


class SubmissionStatus(StrEnum):
    """Client-side state of the final submission."""

    idle = "idle"
    loading = "loading"
    success = "success"
    error = "error"


# ---------------------------------------------------------------------------
# Review submission
# ---------------------------------------------------------------------------


class AudioUpload(BaseModel):
    """One uploaded recording held in memory for the duration of a request."""

    slot: RecordingSlot
    data: bytes
    filename: str = ""
    content_type: str = "audio/webm"

    @property
    def extension(self) -> str:
        """File extension taken from the upload name, ``webm`` when absent."""
        _, dot, ext = self.filename.rpartition(".")
        return ext if dot and ext else "webm"


class ReviewSubmission(BaseModel):
    """A fully validated review, ready for transcription and archival."""

    name: str
    month: str
    score: int | float
    nominations: dict[NominationCategory, str]
    recordings: dict[RecordingSlot, AudioUpload]


class ReviewRecord(BaseModel):
    """The row appended to the review spreadsheet.

    Transcripts and archive locators are empty strings when the
    corresponding dependency failed.
    """

    name: str
    month: str
    score: int | float
    best_performance: str
    most_discipline: str
    most_improved: str
    directors_transcript: str = ""
    system_transcript: str = ""
    directors_url: str = ""
    system_url: str = ""

    def to_row(self) -> list[str | int | float]:
        """Column order A..J of the review sheet."""
        return [
            self.name,
            self.month,
            self.score,
            self.best_performance,
            self.most_discipline,
            self.most_improved,
            self.directors_transcript,
            self.system_transcript,
            self.directors_url,
            self.system_url,
        ]


class ReviewAcceptedResponse(BaseModel):
    """POST /api/reviews success body."""

    message: str = "Review berhasil diproses."


class ErrorResponse(BaseModel):
    """Error envelope returned by the API."""

    error: str
    code: str = Field(default="VOCAL_REVIEW_ERROR")
