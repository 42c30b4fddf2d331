"""Plain text formatter — the plaintext transcript view.

WHY: Besides the interactive, time-synchronized view, readers can switch
to a plain reading view of the whole transcript: no markup, no timing,
just the words, with speakers named inline.

HOW: Joins every cue's plain_text (which already carries the
"Speaker: " prefix) into one string — separated by a single space, or by
a newline when line breaks are switched on.

RULES:
- Uses Cue.plain_text only; display markup never leaks into this view
- linebreaks=False: one running paragraph, cues separated by " "
- linebreaks=True: one cue per line
- Cues with empty text are skipped
- Output suffix: "-transcript.txt", media type "text/plain"
"""

from __future__ import annotations

from typing import List, Sequence

from transcript_sync.core.ir import Cue
from transcript_sync.formatters.base import BaseFormatter, FormatterOutput


def join_plain_text(cues: Sequence[Cue], linebreaks: bool = False) -> str:
    """Concatenate the plain text of all cues."""
    separator = "\n" if linebreaks else " "
    return separator.join(cue.plain_text for cue in cues if cue.plain_text)


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces the plaintext transcript view."""

    def __init__(self, linebreaks: bool = False) -> None:
        self.linebreaks = linebreaks

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, cues: Sequence[Cue]) -> List[FormatterOutput]:
        content = join_plain_text(cues, self.linebreaks)
        if content:
            content += "\n"
        return [
            FormatterOutput(
                suffix="-transcript.txt",
                content=content,
                media_type="text/plain",
            )
        ]
