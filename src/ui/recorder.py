"""
Recording sub-state machine shared by both voice-feedback steps.

States: idle -> requesting -> recording -> (stop) -> idle

Only one capture session exists at a time. Every path out of
``requesting``/``recording`` closes the session, and every captured
recording owns a playback file that is deleted when the recording is
replaced, redone, or the recorder is closed.
"""

import logging
import tempfile
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from src.core.exceptions import RecorderStateError
from src.core.models import RecordingSlot
from src.ui.microphone import CAPTURE_CONTENT_TYPE, BaseMicrophone, CaptureSession

logger = logging.getLogger(__name__)


class RecorderState(StrEnum):
    """Possible states of the recorder."""

    idle = "idle"
    requesting = "requesting"
    recording = "recording"


@dataclass
class CapturedAudio:
    """One finished recording plus its local playback file."""

    data: bytes
    playback_ref: Path
    content_type: str = CAPTURE_CONTENT_TYPE
    released: bool = False

    @classmethod
    def create(
        cls,
        data: bytes,
        directory: Path | None = None,
        content_type: str = CAPTURE_CONTENT_TYPE,
    ) -> "CapturedAudio":
        """Write ``data`` to a fresh playback file."""
        with tempfile.NamedTemporaryFile(
            prefix="vocal-review-", suffix=".wav", dir=directory, delete=False
        ) as handle:
            handle.write(data)
        return cls(data=data, playback_ref=Path(handle.name), content_type=content_type)

    def release(self) -> None:
        """Delete the playback file (idempotent)."""
        if self.released:
            return
        self.playback_ref.unlink(missing_ok=True)
        self.released = True


class Recorder:
    """Drives one microphone for the wizard's two recording slots.

    Args:
        microphone: Device capability.
        recordings: Slot mapping owned by the review draft; finished
            recordings are stored here.
        playback_dir: Where playback files are created (None = system temp).
    """

    def __init__(
        self,
        microphone: BaseMicrophone,
        recordings: dict[RecordingSlot, CapturedAudio | None],
        playback_dir: Path | None = None,
    ) -> None:
        self._microphone = microphone
        self._recordings = recordings
        self._playback_dir = playback_dir
        self._state = RecorderState.idle
        self._session: CaptureSession | None = None
        self._target: RecordingSlot | None = None
        self._cancel_requested = False

    @property
    def microphone(self) -> BaseMicrophone:
        return self._microphone

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def target(self) -> RecordingSlot | None:
        """Slot being recorded, if any."""
        return self._target

    def is_recording(self, slot: RecordingSlot | None = None) -> bool:
        if self._state is not RecorderState.recording:
            return False
        return slot is None or self._target == slot

    def start(self, slot: RecordingSlot) -> None:
        """Acquire the microphone and begin recording into ``slot``.

        Any earlier capture session (for either slot) is released first.

        Raises:
            PermissionDenied: Access refused; the recorder is back to idle.
            DeviceUnavailable: No device; the recorder is back to idle.
        """
        if self._session is not None:
            logger.info("Releasing active capture for %s before starting %s", self._target, slot)
        self._release_session()

        self._state = RecorderState.requesting
        self._target = RecordingSlot(slot)
        self._cancel_requested = False
        try:
            session = self._microphone.acquire()
        except Exception:
            self._reset()
            raise

        if self._cancel_requested:
            logger.info("Acquisition for %s cancelled; releasing device", slot)
            session.close()
            self._reset()
            return

        self._session = session
        self._state = RecorderState.recording

    def stop(self) -> CapturedAudio | None:
        """Finish the active recording and store it in its slot.

        Returns None (and leaves the slot untouched) when no audio arrived.

        Raises:
            RecorderStateError: If nothing is being recorded.
        """
        if self._state is not RecorderState.recording or self._session is None:
            raise RecorderStateError("Tidak ada rekaman yang sedang berjalan.")

        slot = self._target
        session = self._session
        try:
            data = session.stop()
        finally:
            self._release_session()

        if not data:
            logger.warning("Recording for %s produced no audio", slot)
            return None

        captured = CapturedAudio.create(data, self._playback_dir)
        previous = self._recordings.get(slot)
        if previous is not None:
            previous.release()
        self._recordings[slot] = captured
        logger.info("Captured %d bytes for %s", len(data), slot)
        return captured

    def redo(self, slot: RecordingSlot) -> bool:
        """Discard the recording in ``slot``; returns False when there was none."""
        captured = self._recordings.get(slot)
        if captured is None:
            return False
        captured.release()
        self._recordings[slot] = None
        return True

    def cancel(self) -> None:
        """Abort acquisition or recording without producing audio."""
        if self._state is RecorderState.requesting:
            self._cancel_requested = True
            return
        self._release_session()

    def close(self) -> None:
        """End of session: release the device and every playback file."""
        self.cancel()
        self._release_session()
        for slot, captured in self._recordings.items():
            if captured is not None:
                captured.release()
                self._recordings[slot] = None

    def _release_session(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            session.close()
        self._reset()

    def _reset(self) -> None:
        self._state = RecorderState.idle
        self._target = None
