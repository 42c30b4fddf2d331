"""Search-term highlight spans over cue display text.

WHY: The reader types into the search box and every occurrence should
light up in the transcript. The renderer shows display_text, which may
contain <b>/<i>/<v> markup and character references; a query must match
what the reader sees ("hello" matches "hel<i>lo</i>", "tom & jerry"
matches "Tom &amp; Jerry") while the span offsets must point into the
string the renderer actually holds.

HOW: For each cue the visible text is rebuilt from display_text: tags are
skipped, character references are decoded, everything else is copied.
Each visible character keeps the (start, end) span of display_text it
came from, so a decoded "&amp;" maps back to all five source characters.
Matching runs on a lowercased copy of the visible text; each hit is mapped
back through the spans.

RULES:
- Case-insensitive; matches do not overlap and are found left to right
- Offsets index Cue.display_text; end_offset is exclusive
- Only tokens the sanitizer treats as tags are skipped; "<" and ">" runs
  kept as literal text stay searchable
- A match never starts or ends inside a character reference
- An empty, whitespace-only or non-string query yields no matches
- Pure function: no state kept between calls
"""

from __future__ import annotations

import html
import re
from typing import Iterable, List, Tuple

from transcript_sync.core.ir import Cue, SearchMatch
from transcript_sync.core.sanitizer import is_markup

_TOKEN_RE = re.compile(
    r"<[^<>]*>|&(?:#[0-9]+|#[xX][0-9A-Fa-f]+|[A-Za-z][A-Za-z0-9]*);"
)


def _fold(text: str) -> str:
    """Lowercase without changing the length of the string."""
    return "".join(
        lowered if len(lowered) == 1 else char
        for char, lowered in ((char, char.lower()) for char in text)
    )


def visible_text(display_text: str) -> Tuple[str, List[Tuple[int, int]]]:
    """Return (visible text, display_text span of each visible char)."""
    chars: List[str] = []
    spans: List[Tuple[int, int]] = []

    def copy(start: int, end: int) -> None:
        for index in range(start, end):
            chars.append(display_text[index])
            spans.append((index, index + 1))

    pos = 0
    for match in _TOKEN_RE.finditer(display_text):
        copy(pos, match.start())
        pos = match.end()
        token = match.group(0)
        if token.startswith("<"):
            if not is_markup(token):
                copy(match.start(), match.end())
            continue
        decoded = html.unescape(token)
        if decoded == token:
            copy(match.start(), match.end())  # unknown reference
            continue
        for char in decoded:
            chars.append(char)
            spans.append((match.start(), match.end()))
    copy(pos, len(display_text))
    return "".join(chars), spans


def compute_matches(cues: Iterable[Cue], query: str) -> List[SearchMatch]:
    """Find every case-insensitive occurrence of ``query`` in the cues.

    Args:
        cues: Cues to search, in the order matches should be reported.
        query: Text typed by the reader.

    Returns:
        One SearchMatch per occurrence; empty for an empty query.
    """
    if not isinstance(query, str) or not query.strip():
        return []

    needle = _fold(query)
    matches: List[SearchMatch] = []
    for cue in cues:
        text, spans = visible_text(cue.display_text)
        haystack = _fold(text)
        start = haystack.find(needle)
        while start != -1:
            end = start + len(needle)
            matches.append(SearchMatch(
                cue_id=cue.id,
                start_offset=spans[start][0],
                end_offset=spans[end - 1][1],
            ))
            start = haystack.find(needle, end)
    return matches
