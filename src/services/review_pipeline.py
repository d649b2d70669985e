"""Review submission pipeline.

Validates a submitted review, then runs two independent fan-outs
concurrently:

1. transcription of both recordings (language hint: Indonesian), and
2. archival of both recordings to object storage.

Both degrade to ``""`` per recording on failure. Once all four calls have
settled, one row is appended to the review sheet; that append is the only
dependency whose failure fails the request.

Usage::

    pipeline = ReviewPipeline(transcriber, object_store, table_store)
    submission = validate_submission(...)
    record = await pipeline.process(submission)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

from src.core.config import Settings, get_settings
from src.core.exceptions import PersistenceError, ReviewValidationError
from src.core.models import (
    SLOT_SPECS,
    AudioUpload,
    NominationCategory,
    RecordingSlot,
    ReviewRecord,
    ReviewSubmission,
)
from src.core.utils import safe_object_name
from src.services.audio.transcoder import TranscodeQueue
from src.services.storage import BaseObjectStore, BaseTableStore, create_object_store, create_table_store
from src.services.transcription import BaseTranscriber, create_transcriber

logger = logging.getLogger(__name__)

INCOMPLETE_REVIEW = "Data review tidak lengkap."
INCOMPLETE_NOMINATIONS = "Seluruh nominasi wajib diisi."
MISSING_AUDIO = "Rekaman audio wajib diunggah."
AUDIO_TOO_LARGE = "Ukuran rekaman audio melebihi 20 MB."


def _parse_score(raw: str | int | float | None) -> int | float | None:
    """Return the numeric score, or None when ``raw`` is not a number."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = raw
    else:
        try:
            value = float(str(raw).strip())
        except ValueError:
            return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return int(value) if float(value).is_integer() else value


def validate_submission(
    name: str | None,
    month: str | None,
    score: str | int | float | None,
    nominations: Mapping[NominationCategory, str | None],
    recordings: Mapping[RecordingSlot, AudioUpload | None],
    max_audio_bytes: int | None = None,
) -> ReviewSubmission:
    """Check a raw submission and return it in validated form.

    Checks run in order and stop at the first violation: identity and
    score, then nominations, then audio presence, then audio size.

    Raises:
        ReviewValidationError: Carrying the user-facing message.
    """
    numeric_score = _parse_score(score)
    if not name or not month or numeric_score is None:
        raise ReviewValidationError(INCOMPLETE_REVIEW)

    cleaned = {category: (nominations.get(category) or "").strip() for category in NominationCategory}
    if not all(cleaned.values()):
        raise ReviewValidationError(INCOMPLETE_NOMINATIONS)

    uploads = {slot: recordings.get(slot) for slot in RecordingSlot}
    if any(upload is None or not upload.data for upload in uploads.values()):
        raise ReviewValidationError(MISSING_AUDIO)

    if max_audio_bytes is not None and any(len(u.data) > max_audio_bytes for u in uploads.values()):
        raise ReviewValidationError(AUDIO_TOO_LARGE)

    return ReviewSubmission(
        name=name,
        month=month,
        score=numeric_score,
        nominations=cleaned,
        recordings=uploads,
    )


def archive_object_name(submission: ReviewSubmission, upload: AudioUpload) -> str:
    """``<name>_<month>_<label>.<ext>`` made safe for object storage."""
    stem = safe_object_name(submission.name, submission.month, SLOT_SPECS[upload.slot].archive_label)
    return f"{stem}.{upload.extension}"


class ReviewPipeline:
    """Transcribe, archive and record one review.

    Args:
        transcriber: STT provider.
        object_store: Recording archive.
        table_store: Review sheet.
        language: Transcription language hint.
    """

    def __init__(
        self,
        transcriber: BaseTranscriber,
        object_store: BaseObjectStore,
        table_store: BaseTableStore,
        language: str = "id",
    ) -> None:
        self._transcriber = transcriber
        self._object_store = object_store
        self._table_store = table_store
        self._language = language

    async def _degrade(self, call: Callable[[], Awaitable[str]], what: str) -> str:
        """Await ``call()``; log and return ``""`` on any failure."""
        try:
            return await call() or ""
        except Exception:
            logger.exception("%s failed; continuing with an empty value", what)
            return ""

    def _transcribe(self, upload: AudioUpload) -> Awaitable[str]:
        description = SLOT_SPECS[upload.slot].description
        return self._degrade(
            lambda: self._transcriber.transcribe(
                upload.data,
                self._language,
                content_type=upload.content_type,
                label=description,
            ),
            f"Transcription of {description}",
        )

    def _archive(self, submission: ReviewSubmission, upload: AudioUpload) -> Awaitable[str]:
        object_name = archive_object_name(submission, upload)
        return self._degrade(
            lambda: self._object_store.store(object_name, upload.data, upload.content_type),
            f"Archival of {object_name}",
        )

    async def process(self, submission: ReviewSubmission) -> ReviewRecord:
        """Run both fan-outs, then append the combined row.

        Raises:
            PersistenceError: If the review row could not be appended.
        """
        directors = submission.recordings[RecordingSlot.directors]
        system = submission.recordings[RecordingSlot.system]

        (
            directors_transcript,
            system_transcript,
            directors_url,
            system_url,
        ) = await asyncio.gather(
            self._transcribe(directors),
            self._transcribe(system),
            self._archive(submission, directors),
            self._archive(submission, system),
        )

        record = ReviewRecord(
            name=submission.name,
            month=submission.month,
            score=submission.score,
            best_performance=submission.nominations[NominationCategory.best_performance],
            most_discipline=submission.nominations[NominationCategory.most_discipline],
            most_improved=submission.nominations[NominationCategory.most_improved],
            directors_transcript=directors_transcript,
            system_transcript=system_transcript,
            directors_url=directors_url,
            system_url=system_url,
        )

        try:
            await self._table_store.append_row(record.to_row())
        except PersistenceError:
            logger.exception("Review row for %s (%s) was not persisted", submission.name, submission.month)
            raise
        except Exception as exc:
            logger.exception("Review row for %s (%s) was not persisted", submission.name, submission.month)
            raise PersistenceError(f"Review row append failed: {exc}") from exc

        logger.info(
            "Review stored name=%s month=%s transcripts=%d/2 archived=%d/2",
            submission.name,
            submission.month,
            sum(1 for t in (directors_transcript, system_transcript) if t),
            sum(1 for u in (directors_url, system_url) if u),
        )
        return record


def build_review_pipeline(
    settings: Settings | None = None,
    transcode_queue: TranscodeQueue | None = None,
) -> ReviewPipeline:
    """Assemble a pipeline from settings."""
    settings = settings or get_settings()
    kwargs = {}
    if settings.transcription_provider in ("whisper", "local"):
        kwargs["transcode_queue"] = transcode_queue or TranscodeQueue()
    return ReviewPipeline(
        transcriber=create_transcriber(settings.transcription_provider, **kwargs),
        object_store=create_object_store(settings),
        table_store=create_table_store(settings),
        language=settings.transcription_language,
    )
