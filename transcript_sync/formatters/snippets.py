"""Snippets formatter — the interactive view as JSON.

WHY: A renderer living outside Python (a web page, a native player
overlay) needs the interactive transcript as data: one entry per cue with
its timing, speaker, decorated text and, when requested, the clock label
for timestamp decoration.

HOW: Builds a SnippetIndex over the cues and serializes one Snippet per
cue to a JSON array.

RULES:
- One object per cue, in start-time order
- Keys: id, start, end, speaker, text, timestamp
- timestamp is null unless timestamps=True
- text is Cue.display_text (b/i/v markup allowed)
- Output suffix: "-snippets.json", media type "application/json"
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from transcript_sync.core.ir import Cue
from transcript_sync.core.snippets import SnippetIndex
from transcript_sync.formatters.base import BaseFormatter, FormatterOutput


class SnippetsFormatter(BaseFormatter):
    """Formatter that produces interactive snippets as JSON."""

    def __init__(self, timestamps: bool = False) -> None:
        self.timestamps = timestamps

    @property
    def name(self) -> str:
        return "Interactive Snippets"

    def format(self, cues: Sequence[Cue]) -> List[FormatterOutput]:
        index = SnippetIndex(cues)
        items: List[Dict[str, Any]] = []
        for cue in index:
            snippet = index.snippet(cue.id, timestamp=self.timestamps)
            items.append({
                "id": snippet.cue_id,
                "start": snippet.start_time,
                "end": snippet.end_time,
                "speaker": snippet.speaker,
                "text": snippet.text,
                "timestamp": snippet.timestamp,
            })
        return [
            FormatterOutput(
                suffix="-snippets.json",
                content=json.dumps(items, indent=2, ensure_ascii=False) + "\n",
                media_type="application/json",
            )
        ]
