"""
Review wizard state machine.

Steps: welcome -> score -> nominations -> record directors -> record system -> success

``WizardEngine`` owns one ``ReviewDraft`` and one ``Recorder`` for the
lifetime of a wizard session. The UI reads the draft, calls the mutators
and navigation methods, and never touches the draft directly.
``next()`` only advances when the current step's predicate holds; on the
record-system step it submits the review instead, and success is reachable
only through a successful submission.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Protocol

from src.core.exceptions import RecorderStateError
from src.core.models import NominationCategory, RecordingSlot, SubmissionStatus
from src.ui.microphone import BaseMicrophone, BrowserMicrophone
from src.ui.recorder import CapturedAudio, Recorder

logger = logging.getLogger(__name__)

SUBMIT_SUCCESS_MESSAGE = "Review berhasil dikirim."
MIN_SCORE = 1
MAX_SCORE = 10


class Step(IntEnum):
    """Wizard steps in display order."""

    welcome = 0
    score = 1
    nominations = 2
    record_directors = 3
    record_system = 4
    success = 5


STEP_COUNT = len(Step)
SUBMIT_STEP = Step.record_system
RECORDING_STEPS: dict[Step, RecordingSlot] = {
    Step.record_directors: RecordingSlot.directors,
    Step.record_system: RecordingSlot.system,
}


@dataclass
class Submission:
    status: SubmissionStatus = SubmissionStatus.idle
    message: str = ""


@dataclass
class ReviewDraft:
    """Everything the reviewer has entered so far."""

    subject_name: str
    period: str
    step: Step = Step.welcome
    score: int | None = None
    nominations: dict[NominationCategory, str] = field(
        default_factory=lambda: {category: "" for category in NominationCategory}
    )
    recordings: dict[RecordingSlot, CapturedAudio | None] = field(
        default_factory=lambda: {slot: None for slot in RecordingSlot}
    )
    submission: Submission = field(default_factory=Submission)


class ReviewSubmitter(Protocol):
    """Sends a completed draft to the backend and returns its message."""

    def submit_review(self, draft: ReviewDraft) -> str: ...


class WizardEngine:
    """Step gating, navigation and submission for one review session.

    Args:
        draft: Session state.
        recorder: Recording sub-state machine bound to ``draft.recordings``.
        submitter: Backend client.
        employee_options: Peer names offered for nominations.
    """

    def __init__(
        self,
        draft: ReviewDraft,
        recorder: Recorder,
        submitter: ReviewSubmitter,
        employee_options: list[str] | None = None,
    ) -> None:
        self.draft = draft
        self.recorder = recorder
        self._submitter = submitter
        self._employee_options = list(employee_options or [])
        self._validators: dict[Step, Callable[[], bool]] = {
            Step.welcome: lambda: True,
            Step.score: lambda: self.draft.score is not None,
            Step.nominations: self._nominations_complete,
            Step.record_directors: lambda: self.draft.recordings[RecordingSlot.directors] is not None,
            Step.record_system: lambda: self.draft.recordings[RecordingSlot.system] is not None,
            Step.success: lambda: True,
        }

    @classmethod
    def start(
        cls,
        subject_name: str,
        period: str,
        microphone: BaseMicrophone,
        submitter: ReviewSubmitter,
        employee_options: list[str] | None = None,
        playback_dir: Path | None = None,
    ) -> "WizardEngine":
        """Create a fresh session at the welcome step."""
        draft = ReviewDraft(subject_name=subject_name, period=period)
        recorder = Recorder(microphone, draft.recordings, playback_dir=playback_dir)
        return cls(draft, recorder, submitter, employee_options)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def step(self) -> Step:
        return self.draft.step

    @property
    def is_submitting(self) -> bool:
        return self.draft.submission.status is SubmissionStatus.loading

    def can_proceed(self) -> bool:
        """Current step's validation predicate."""
        return self._validators[self.draft.step]()

    def nomination_options(self) -> list[str]:
        """Peers that may be nominated (never the subject)."""
        return [name for name in self._employee_options if name != self.draft.subject_name]

    def _nominations_complete(self) -> bool:
        return all(
            value and value != self.draft.subject_name for value in self.draft.nominations.values()
        )

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def select_score(self, value: int) -> None:
        """Set the 1-10 satisfaction score (score step only)."""
        if self.draft.step is not Step.score:
            raise ValueError("Score can only be selected on the score step")
        if not MIN_SCORE <= int(value) <= MAX_SCORE:
            raise ValueError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {value}")
        self.draft.score = int(value)

    def set_nomination(self, category: NominationCategory | str, name: str) -> None:
        """Record a nomination; ``""`` clears it."""
        category = NominationCategory(category)
        name = (name or "").strip()
        if name and self._employee_options and name not in self.nomination_options():
            raise ValueError(f"{name!r} is not a valid nominee")
        if name and name == self.draft.subject_name:
            raise ValueError("The subject cannot nominate themselves")
        self.draft.nominations[category] = name

    def start_recording(self, slot: RecordingSlot) -> None:
        """Begin recording into ``slot``; only on that slot's step."""
        if RECORDING_STEPS.get(self.draft.step) != slot:
            raise RecorderStateError("Rekaman hanya dapat dimulai pada langkahnya sendiri.")
        self.recorder.start(slot)

    def stop_recording(self) -> CapturedAudio | None:
        return self.recorder.stop()

    def record_browser_audio(self, slot: RecordingSlot, data: bytes) -> CapturedAudio | None:
        """Store a recording that finished in the reviewer's browser into ``slot``."""
        microphone = self.recorder.microphone
        if not isinstance(microphone, BrowserMicrophone):
            raise RecorderStateError("Perekam browser tidak aktif.")
        if RECORDING_STEPS.get(self.draft.step) != slot:
            raise RecorderStateError("Rekaman hanya dapat dimulai pada langkahnya sendiri.")
        microphone.deliver(data)
        self.start_recording(slot)
        return self.stop_recording()

    def redo(self, slot: RecordingSlot) -> bool:
        return self.recorder.redo(slot)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next(self) -> bool:
        """Advance (or submit on the last data-entry step).

        Returns:
            True when the step changed.
        """
        if self.is_submitting or not self.can_proceed():
            return False
        if self.draft.step is SUBMIT_STEP:
            if not self.begin_submission():
                return False
            return self.complete_submission()
        if self.draft.step is Step.success:
            return False
        self._leave_step()
        self.draft.step = Step(self.draft.step + 1)
        return True

    def prev(self) -> bool:
        """Go back one step, keeping every entered value."""
        if self.draft.step in (Step.welcome, Step.success) or self.is_submitting:
            return False
        self._leave_step()
        self.draft.step = Step(self.draft.step - 1)
        return True

    def begin_submission(self) -> bool:
        """Mark the submission as in flight; False if it cannot start."""
        if self.draft.step is not SUBMIT_STEP or self.is_submitting or not self.can_proceed():
            return False
        self.recorder.cancel()
        self.draft.submission = Submission(SubmissionStatus.loading)
        return True

    def complete_submission(self) -> bool:
        """Send the draft; jump to success or stay with an error message."""
        if not self.is_submitting:
            return False
        try:
            self._submitter.submit_review(self.draft)
        except Exception as exc:
            message = getattr(exc, "message", None) or str(exc)
            logger.warning("Review submission failed: %s", message)
            self.draft.submission = Submission(SubmissionStatus.error, message)
            return False
        self.draft.submission = Submission(SubmissionStatus.success, SUBMIT_SUCCESS_MESSAGE)
        self.draft.step = Step.success
        return True

    def close(self) -> None:
        """End the session and release every audio resource."""
        self.recorder.close()

    def _leave_step(self) -> None:
        if self.draft.step in RECORDING_STEPS:
            self.recorder.cancel()
