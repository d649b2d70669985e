"""
Step views of the review wizard plus its navigation footer.
"""

import streamlit as st

from src.core.models import NOMINATION_LABELS, RecordingSlot
from src.ui.components.recorder import render_recorder
from src.ui.wizard import MAX_SCORE, MIN_SCORE, STEP_COUNT, Step, WizardEngine

WELCOME_COPY = (
    "Review ini membutuhkan waktu sekitar 5-10 menit dan harus diselesaikan dalam satu sesi.",
    'Pada bagian umpan balik suara, aplikasi akan meminta izin mikrofon. Silakan izinkan untuk melanjutkan.',
)
SCORE_HEADING = "Evaluasi Kuantitatif"
SCORE_COPY = (
    "Seberapa puas Anda dengan performa bulan ini?",
    "Pilih angka antara 1 (perlu perbaikan) hingga 10 (sangat memuaskan).",
)
NOMINATIONS_HEADING = "Nominasi Rekan Kerja"
NOMINATION_PLACEHOLDER = "Pilih nama"
RECORDING_COPY = {
    RecordingSlot.directors: (
        "Saran untuk Directors/CEO/HR",
        'Klik "Rekam" untuk memulai, lalu "Stop" setelah selesai. '
        "Anda bisa mendengarkan atau merekam ulang sebelum lanjut.",
    ),
    RecordingSlot.system: (
        "Saran untuk Sistem Kenapa Creative",
        'Rekam jawaban Anda, kemudian tekan "Submit Final Review" untuk mengirim seluruh data.',
    ),
}


def step_badge(step: Step) -> str:
    """``"Langkah N dari 5"`` for the data-entry steps after welcome."""
    return f"Langkah {int(step) + 1} dari {STEP_COUNT - 1}"


def next_label(engine: WizardEngine) -> str:
    if engine.is_submitting:
        return "Mengirim..."
    if engine.step is Step.record_directors:
        return "Confirm & Next"
    if engine.step is Step.record_system:
        return "Submit Final Review"
    return "Next"


def render_welcome(engine: WizardEngine) -> None:
    st.caption(f"{engine.draft.period} Review")
    st.title(f"Halo, {engine.draft.subject_name}! 👋")
    st.subheader("Selamat datang di Project Vocal Review")
    for line in WELCOME_COPY:
        st.write(line)


def render_score(engine: WizardEngine) -> None:
    st.caption(step_badge(Step.score))
    st.header(SCORE_HEADING)
    for line in SCORE_COPY:
        st.write(line)

    columns = st.columns(MAX_SCORE - MIN_SCORE + 1)
    for column, value in zip(columns, range(MIN_SCORE, MAX_SCORE + 1), strict=True):
        with column:
            selected = engine.draft.score == value
            if st.button(
                str(value),
                key=f"score_{value}",
                type="primary" if selected else "secondary",
                use_container_width=True,
            ):
                engine.select_score(value)
                st.rerun()


def render_nominations(engine: WizardEngine) -> None:
    st.caption(step_badge(Step.nominations))
    st.header(NOMINATIONS_HEADING)

    options = ["", *engine.nomination_options()]
    for category, label in NOMINATION_LABELS.items():
        current = engine.draft.nominations[category]
        choice = st.selectbox(
            label,
            options,
            index=options.index(current) if current in options else 0,
            format_func=lambda name: name or NOMINATION_PLACEHOLDER,
            key=f"nomination_{category}",
        )
        if choice != current:
            engine.set_nomination(category, choice)


def render_recording(engine: WizardEngine, slot: RecordingSlot) -> None:
    step = Step.record_directors if slot is RecordingSlot.directors else Step.record_system
    heading, helper = RECORDING_COPY[slot]
    st.caption(step_badge(step))
    st.header(heading)
    st.write(helper)
    with st.container(border=True):
        render_recorder(engine, slot)


def render_success(engine: WizardEngine) -> None:  # noqa: ARG001
    st.title("Terima kasih! 🎉")
    st.write("Review Anda telah kami terima. Silakan tutup tab ini.")


def render_footer(engine: WizardEngine) -> None:
    """Back / Next buttons plus the submission feedback line.

    Submitting is split across two reruns so the disabled "Mengirim..."
    button is on screen while the request is in flight.
    """
    submission = engine.draft.submission
    if submission.status == "error":
        st.error(submission.message)

    col_back, _, col_next = st.columns([1, 2, 1])
    with col_back:
        if st.button(
            "Back",
            key="nav_prev",
            disabled=engine.step is Step.welcome or engine.is_submitting,
            use_container_width=True,
        ):
            engine.prev()
            st.rerun()
    with col_next:
        clicked = st.button(
            next_label(engine),
            key="nav_next",
            type="primary",
            disabled=not engine.can_proceed() or engine.is_submitting,
            use_container_width=True,
        )

    if clicked:
        if engine.step is Step.record_system:
            engine.begin_submission()
        else:
            engine.next()
        st.rerun()

    if engine.is_submitting:
        with st.spinner("Mengirim..."):
            engine.complete_submission()
        st.rerun()


_RENDERERS = {
    Step.welcome: render_welcome,
    Step.score: render_score,
    Step.nominations: render_nominations,
    Step.record_directors: lambda engine: render_recording(engine, RecordingSlot.directors),
    Step.record_system: lambda engine: render_recording(engine, RecordingSlot.system),
    Step.success: render_success,
}


def render_step(engine: WizardEngine) -> None:
    """Render the current step and, before success, the footer."""
    _RENDERERS[engine.step](engine)
    if engine.step is not Step.success:
        st.divider()
        render_footer(engine)
