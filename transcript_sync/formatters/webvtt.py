"""WebVTT formatter — renders parsed cues back to caption-track text.

WHY: Hosts that edit or filter a transcript need to write it back out,
and the parser is only trustworthy if what it reads can be written and
read again with the same timing and text.

HOW: Writes the WEBVTT signature, then one block per cue: the original
identifier (if any), a timing line and the raw payload exactly as parsed.

RULES:
- Timestamps are always written as HH:MM:SS.mmm
- The raw payload is written unchanged (markup included)
- Blocks are separated by one blank line; output ends with a newline
- An empty cue list produces just the signature
"""

from __future__ import annotations

from typing import List, Sequence

from transcript_sync.core.ir import Cue
from transcript_sync.core.timecode import format_timestamp
from transcript_sync.formatters.base import BaseFormatter, FormatterOutput


def render_cue(cue: Cue) -> str:
    """Render one cue block (without the trailing blank line)."""
    lines: List[str] = []
    if cue.identifier:
        lines.append(cue.identifier)
    lines.append("{} --> {}".format(
        format_timestamp(cue.start_time), format_timestamp(cue.end_time),
    ))
    lines.append(cue.raw_text)
    return "\n".join(lines)


class WebVTTFormatter(BaseFormatter):
    """Formatter that produces a WebVTT caption file."""

    @property
    def name(self) -> str:
        return "WebVTT"

    def format(self, cues: Sequence[Cue]) -> List[FormatterOutput]:
        blocks = ["WEBVTT"]
        blocks.extend(render_cue(cue) for cue in cues)
        return [
            FormatterOutput(
                suffix=".vtt",
                content="\n\n".join(blocks) + "\n",
                media_type="text/vtt",
            )
        ]
