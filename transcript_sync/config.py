"""Configuration constants, default messages, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. The poll interval, fetch timeout and message texts
are plain data — not buried in the tracker or the loader — so both humans
and embedding hosts can change them confidently.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from the environment with typed fallbacks.

RULES:
- All defaults can be overridden via environment variables
- Unparseable or non-positive numeric values fall back to the default
- Message texts are the library's default (English) wording; translation
  is the host's business
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_number(name: str, default: float) -> float:
    """Read a positive number from the environment, falling back to default."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


# ---------------------------------------------------------------------------
# Position tracking
# ---------------------------------------------------------------------------

DEFAULT_POLL_INTERVAL_MS = 250
"""Poll interval for sources that cannot notify on position change."""

POLL_INTERVAL_MS = int(_env_number("TRANSCRIPT_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS))

# ---------------------------------------------------------------------------
# Caption loading
# ---------------------------------------------------------------------------

FETCH_TIMEOUT_S = _env_number("TRANSCRIPT_FETCH_TIMEOUT_S", 30.0)

# ---------------------------------------------------------------------------
# Logging (CLI only; the library never configures logging itself)
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("TRANSCRIPT_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"

# ---------------------------------------------------------------------------
# Default messages
# ---------------------------------------------------------------------------

NO_MEDIUM_MESSAGE = "No medium was assigned to the transcript."
NO_TRANSCRIPT_MESSAGE = "No transcript was provided."
TROUBLE_WEBVTT_MESSAGE = (
    "There seems to be something wrong with the WebVTT file. "
    "Please consult the log output for more information."
)
