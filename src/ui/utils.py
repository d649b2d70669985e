"""UI utility functions."""

import logging
import shutil
import tempfile
import time
from collections.abc import Mapping
from pathlib import Path

from src.core.utils import current_month_name

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT_NAME = "Karyawan"
SESSION_DIR_PREFIX = "session-"


def _first(value) -> str:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else ""
    return str(value or "").strip()


def read_launch_params(query_params: Mapping) -> tuple[str, str]:
    """Return ``(subject_name, period)`` from the wizard URL's query string.

    Missing or blank values fall back to ``"Karyawan"`` and the current
    Indonesian month name.
    """
    name = _first(query_params.get("name")) or DEFAULT_SUBJECT_NAME
    month = _first(query_params.get("month")) or current_month_name()
    return name, month


def page_title(subject_name: str, period: str) -> str:
    return f"Review {subject_name} - {period}"


# ---------------------------------------------------------------------------
# Playback files
# ---------------------------------------------------------------------------


def playback_root(configured: str = "") -> Path:
    """Directory holding one playback sub-directory per wizard session."""
    root = Path(configured) if configured else Path(tempfile.gettempdir()) / "vocal-review"
    root.mkdir(parents=True, exist_ok=True)
    return root


def create_session_dir(root: Path) -> Path:
    return Path(tempfile.mkdtemp(prefix=SESSION_DIR_PREFIX, dir=root))


def purge_stale_sessions(root: Path, max_age_hours: float, now: float | None = None) -> int:
    """Delete session directories untouched for longer than ``max_age_hours``.

    Sessions abandoned without ``WizardEngine.close()`` leave their playback
    files behind; this is run once per process at startup.

    Returns:
        Number of directories removed.
    """
    cutoff = (now if now is not None else time.time()) - max_age_hours * 3600
    removed = 0
    for entry in root.glob(f"{SESSION_DIR_PREFIX}*"):
        if not entry.is_dir() or entry.stat().st_mtime >= cutoff:
            continue
        shutil.rmtree(entry, ignore_errors=True)
        removed += 1
    if removed:
        logger.info("Purged %d stale playback session(s) under %s", removed, root)
    return removed
