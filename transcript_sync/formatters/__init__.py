"""Output formatter registry — pluggable transcript views.

WHY: The CLI and host adapters need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["plain_text"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- Values are BaseFormatter subclasses (not instances)
- Every formatter must be constructible without arguments
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from transcript_sync.formatters.plain_text import PlainTextFormatter
from transcript_sync.formatters.snippets import SnippetsFormatter
from transcript_sync.formatters.webvtt import WebVTTFormatter

if TYPE_CHECKING:
    from transcript_sync.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "webvtt": WebVTTFormatter,
    "plain_text": PlainTextFormatter,
    "snippets": SnippetsFormatter,
}
