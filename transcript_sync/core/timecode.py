"""WebVTT timestamp parsing and formatting.

WHY: The parser reads timestamps, the WebVTT formatter writes them back,
and the interactive view decorates snippets with a short clock label.
Keeping all three conversions in one place guarantees that a parsed time
re-renders to the same text.

HOW: A single regex validates ``[HH:]MM:SS.mmm``; formatting works on
integer milliseconds to avoid float drift.

RULES:
- Hours are optional on input and may have more than two digits
- Minutes and seconds must be below 60, milliseconds exactly 3 digits
- format_timestamp() always writes hours: HH:MM:SS.mmm
- clock_label() drops hours below one hour: MM:SS, else H:MM:SS
- Negative and non-finite (NaN, infinite) inputs format as zero
"""

from __future__ import annotations

import math
import re

_TIMESTAMP_RE = re.compile(r"^(?:(\d{2,}):)?(\d{2}):(\d{2})\.(\d{3})$")


def parse_timestamp(text: str) -> float | None:
    """Convert a WebVTT timestamp to seconds, or None when malformed."""
    match = _TIMESTAMP_RE.match(text.strip())
    if not match:
        return None
    hours, minutes, seconds, millis = match.groups()
    if int(minutes) > 59 or int(seconds) > 59:
        return None
    return (
        int(hours or 0) * 3600
        + int(minutes) * 60
        + int(seconds)
        + int(millis) / 1000.0
    )


def _clamp(seconds: float) -> float:
    if not math.isfinite(seconds):
        return 0.0
    return max(seconds, 0.0)


def _split_millis(seconds: float) -> tuple[int, int, int, int]:
    total_ms = int(round(_clamp(seconds) * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return hours, minutes, secs, millis


def format_timestamp(seconds: float) -> str:
    """Format seconds as a WebVTT timestamp ``HH:MM:SS.mmm``."""
    hours, minutes, secs, millis = _split_millis(seconds)
    return "{:02d}:{:02d}:{:02d}.{:03d}".format(hours, minutes, secs, millis)


def clock_label(seconds: float) -> str:
    """Short label for timestamp decoration, e.g. ``01:05`` or ``1:02:03``."""
    hours, minutes, secs, _ = _split_millis(int(_clamp(seconds)))
    if hours:
        return "{}:{:02d}:{:02d}".format(hours, minutes, secs)
    return "{:02d}:{:02d}".format(minutes, secs)
