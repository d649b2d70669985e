"""
Vocal Review Streamlit wizard: main entry point.

Run with: ``streamlit run src/ui/app.py`` and open
``http://localhost:8501/?name=Budi&month=Maret``.
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from src.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (src/ui/).
# ---------------------------------------------------------------------------
import shutil  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from src.core.config import get_settings  # noqa: E402
from src.core.utils import configure_logging  # noqa: E402
from src.ui.api_client import get_api_client  # noqa: E402
from src.ui.components.steps import render_step  # noqa: E402
from src.ui.microphone import create_microphone  # noqa: E402
from src.ui.utils import (  # noqa: E402
    create_session_dir,
    page_title,
    playback_root,
    purge_stale_sessions,
    read_launch_params,
)
from src.ui.wizard import Step, WizardEngine  # noqa: E402

_settings = get_settings()
configure_logging(_settings.log_level)

_name, _month = read_launch_params(st.query_params)

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title=page_title(_name, _month),
    page_icon="\U0001f399\ufe0f",
    layout="centered",
)


@st.cache_resource
def _playback_root() -> Path:
    """Resolve the playback root and drop abandoned sessions, once per process."""
    root = playback_root(_settings.playback_dir)
    purge_stale_sessions(root, _settings.playback_ttl_hours)
    return root


def _discard_session_dir() -> None:
    directory = st.session_state.pop("playback_dir", None)
    if directory is not None:
        shutil.rmtree(directory, ignore_errors=True)


_client = get_api_client(_settings.api_base_url)

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    _conn_ok, _conn_msg = _client.check_connection()
    if _conn_ok:
        st.success(f"Server: {_conn_msg}")
    else:
        st.error(f"Server: {_conn_msg}")

# ---------------------------------------------------------------------------
# Session state: one wizard engine per browser session and subject
# ---------------------------------------------------------------------------
_engine: WizardEngine | None = st.session_state.get("wizard")
if _engine is None or (_engine.draft.subject_name, _engine.draft.period) != (_name, _month):
    if _engine is not None:
        _engine.close()
        _discard_session_dir()
    _session_dir = create_session_dir(_playback_root())
    _engine = WizardEngine.start(
        subject_name=_name,
        period=_month,
        microphone=create_microphone(_settings),
        submitter=_client,
        employee_options=_settings.employee_names,
        playback_dir=_session_dir,
    )
    st.session_state.wizard = _engine
    st.session_state.playback_dir = _session_dir

render_step(_engine)

if _engine.step is Step.success:
    # Nothing left to play back or send.
    _engine.close()
    _discard_session_dir()
