"""Shared utility functions for Vocal Review."""

import logging
import re
from datetime import date

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_CHARS = re.compile(r"[^a-z0-9_\-]")

# Month names used when the wizard is opened without ?month=
INDONESIAN_MONTHS = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)


def safe_object_name(name: str, month: str, label: str) -> str:
    """Build a deterministic, filesystem-safe stem from subject, period and label.

    Lower-cases, collapses whitespace runs to ``_`` and strips anything
    outside ``[a-z0-9_-]``.
    """
    stem = f"{name}_{month}_{label}".lower()
    stem = _WHITESPACE.sub("_", stem)
    return _UNSAFE_CHARS.sub("", stem)


def current_month_name(today: date | None = None) -> str:
    """Return the Indonesian name of the current (or given) month."""
    today = today or date.today()
    return INDONESIAN_MONTHS[today.month - 1]


def configure_logging(level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    for noisy in ("httpx", "httpcore", "urllib3", "googleapiclient.discovery_cache"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
