"""
Review submission endpoint.

``POST /api/reviews`` accepts the wizard's multipart body, validates it and
hands it to the ``ReviewPipeline``. No business logic lives here beyond
reading the form parts.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from src.core.config import get_settings
from src.core.models import (
    SLOT_SPECS,
    AudioUpload,
    ErrorResponse,
    NominationCategory,
    RecordingSlot,
    ReviewAcceptedResponse,
)
from src.services.review_pipeline import ReviewPipeline, build_review_pipeline, validate_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


def get_review_pipeline(request: Request) -> ReviewPipeline:
    """Return the application's pipeline, building it on first use."""
    pipeline = getattr(request.app.state, "review_pipeline", None)
    if pipeline is None:
        pipeline = build_review_pipeline(get_settings(), getattr(request.app.state, "transcode_queue", None))
        request.app.state.review_pipeline = pipeline
    return pipeline


async def _read_upload(slot: RecordingSlot, upload: UploadFile | None, limit: int) -> AudioUpload | None:
    """Read at most ``limit + 1`` bytes so oversize parts are detectable."""
    if upload is None:
        return None
    data = await upload.read(limit + 1)
    return AudioUpload(
        slot=slot,
        data=data,
        filename=upload.filename or "",
        content_type=upload.content_type or "audio/webm",
    )


@router.post(
    "",
    response_model=ReviewAcceptedResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_review(
    pipeline: ReviewPipeline = Depends(get_review_pipeline),
    name: str = Form(""),
    month: str = Form(""),
    score: str = Form(""),
    best_performance: str = Form("", alias="bestPerformance"),
    most_discipline: str = Form("", alias="mostDiscipline"),
    most_improved: str = Form("", alias="mostImproved"),
    audio_directors: UploadFile | None = File(None, alias="audioDirectors"),
    audio_system: UploadFile | None = File(None, alias="audioSystem"),
):
    """Validate, transcribe, archive and record one review."""
    limit = get_settings().max_audio_bytes
    recordings = {
        RecordingSlot.directors: await _read_upload(RecordingSlot.directors, audio_directors, limit),
        RecordingSlot.system: await _read_upload(RecordingSlot.system, audio_system, limit),
    }

    submission = validate_submission(
        name=name,
        month=month,
        score=score,
        nominations={
            NominationCategory.best_performance: best_performance,
            NominationCategory.most_discipline: most_discipline,
            NominationCategory.most_improved: most_improved,
        },
        recordings=recordings,
        max_audio_bytes=limit,
    )
    logger.info(
        "Review received name=%s month=%s sizes=%s",
        submission.name,
        submission.month,
        {SLOT_SPECS[slot].form_field: len(upload.data) for slot, upload in submission.recordings.items()},
    )

    await pipeline.process(submission)
    return ReviewAcceptedResponse()
