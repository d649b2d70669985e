"""
Recorder component: record / stop / redo controls for one voice slot.

States: idle -> requesting -> recording -> idle

With the browser microphone the reviewer records through ``st.audio_input``
and the finished clip is handed to the wizard in one step; the local
microphone gets explicit Rekam / Stop buttons.
"""

import logging

import streamlit as st

from src.core.exceptions import RecordingError
from src.core.models import RecordingSlot
from src.ui.microphone import BrowserMicrophone
from src.ui.wizard import WizardEngine

logger = logging.getLogger(__name__)

EMPTY_RECORDING_WARNING = "Tidak ada suara yang terekam. Silakan coba lagi."


def status_copy(engine: WizardEngine, slot: RecordingSlot) -> str:
    """Line shown under the controls."""
    if engine.recorder.is_recording(slot):
        return "Sedang merekam..."
    if engine.draft.recordings[slot] is not None:
        return "Rekaman siap dikirim."
    return "Belum ada rekaman."


def render_recorder(engine: WizardEngine, slot: RecordingSlot) -> None:
    """Render the controls, the playback widget and the status line."""
    if isinstance(engine.recorder.microphone, BrowserMicrophone):
        _render_browser_controls(engine, slot)
    else:
        _render_local_controls(engine, slot)

    captured = engine.draft.recordings[slot]
    if captured is not None:
        st.audio(str(captured.playback_ref), format=captured.content_type)
    st.caption(status_copy(engine, slot))


def _render_browser_controls(engine: WizardEngine, slot: RecordingSlot) -> None:
    # Bumping the nonce gives st.audio_input a fresh key, clearing its clip.
    nonce_key = f"_audio_input_nonce_{slot}"
    nonce = st.session_state.get(nonce_key, 0)

    if engine.draft.recordings[slot] is None:
        audio = st.audio_input(
            "Rekam suara",
            key=f"audio_input_{slot}_{nonce}",
            disabled=engine.is_submitting,
        )
        if audio is None:
            return
        st.session_state[nonce_key] = nonce + 1
        try:
            captured = engine.record_browser_audio(slot, audio.getvalue())
        except RecordingError as exc:
            logger.warning("Could not store browser recording for %s: %s", slot, exc.detail)
            st.error(exc.detail)
            return
        if captured is None:
            st.warning(EMPTY_RECORDING_WARNING)
            return
        st.rerun()

    if st.button("Rekam Ulang", key=f"redo_{slot}", disabled=engine.is_submitting):
        engine.redo(slot)
        st.session_state[nonce_key] = nonce + 1
        st.rerun()


def _render_local_controls(engine: WizardEngine, slot: RecordingSlot) -> None:
    recording = engine.recorder.is_recording(slot)
    captured = engine.draft.recordings[slot]

    col_record, col_stop, col_redo = st.columns(3)
    with col_record:
        if st.button(
            "Merekam..." if recording else "Rekam",
            key=f"record_{slot}",
            type="primary",
            disabled=recording or engine.is_submitting,
            use_container_width=True,
        ):
            try:
                engine.start_recording(slot)
            except RecordingError as exc:
                logger.warning("Could not start recording for %s: %s", slot, exc.detail)
                st.error(exc.detail)
            else:
                st.rerun()
    with col_stop:
        if st.button("Stop", key=f"stop_{slot}", disabled=not recording, use_container_width=True):
            if engine.stop_recording() is None:
                st.warning(EMPTY_RECORDING_WARNING)
            else:
                st.rerun()
    with col_redo:
        if st.button(
            "Rekam Ulang",
            key=f"redo_{slot}",
            disabled=captured is None or engine.is_submitting,
            use_container_width=True,
        ):
            engine.redo(slot)
            st.rerun()
