"""WebVTT caption-track parsing into normalized Cue objects.

WHY: The transcript arrives as a WebVTT file written by people and tools
of varying care. The viewer must show whatever is usable and explain the
rest: one broken block must not cost the whole transcript. Every accepted
cue also needs its text pre-normalized for both views so that renderers
and the search highlighter never deal with raw markup.

HOW: The text is split into lines and walked block by block (blocks are
separated by blank lines). Each block is classified (comment/style/region
metadata or cue), the timing line is validated, and the payload is joined
into one logical line. The payload then goes through the sanitizer twice:
once with the display allow-list and once with none, the first voice tag
turned into a speaker split / "Speaker: " prefix.

RULES:
- The file must start with the "WEBVTT" signature, otherwise no cues
- Header lines after the signature (up to the first blank line) are ignored
- NOTE, STYLE and REGION blocks are skipped without error
- Timing line: ``start --> end [settings]``; settings are ignored
- Rejected blocks produce a ParseError and parsing continues
- end_time must be greater than start_time
- start_time must not be before the previous accepted cue's start_time
- Cue ids are ordinals of accepted cues, starting at 0
- Never raises on malformed input
"""

from __future__ import annotations

import html
import logging
import re
from typing import List, Optional, Tuple

from transcript_sync.core.ir import Cue, ParseError, ParseResult
from transcript_sync.core.sanitizer import (
    DISPLAY_TAGS,
    PLAIN_TAGS,
    extract_voice,
    sanitize,
)
from transcript_sync.core.timecode import parse_timestamp

logger = logging.getLogger(__name__)

_SIGNATURE_RE = re.compile(r"^WEBVTT(?:[ \t].*)?$")
_METADATA_BLOCK_RE = re.compile(r"^(?:NOTE|STYLE|REGION)(?:[ \t].*)?$")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_ARROW = "-->"


def _split_blocks(lines: List[str], first: int) -> List[Tuple[int, List[str]]]:
    """Group lines into blank-line separated blocks.

    Returns (1-based line number of the block's first line, lines) pairs.
    """
    blocks: List[Tuple[int, List[str]]] = []
    current: List[str] = []
    start_line = 0
    for index in range(first, len(lines)):
        line = lines[index]
        if line.strip():
            if not current:
                start_line = index + 1
            current.append(line)
        elif current:
            blocks.append((start_line, current))
            current = []
    if current:
        blocks.append((start_line, current))
    return blocks


def _parse_timing(line: str, line_no: int) -> Tuple[Optional[Tuple[float, float]], Optional[ParseError]]:
    """Validate a timing line and return (start, end) seconds or an error."""
    arrow_at = line.find(_ARROW)
    left = line[:arrow_at]
    right = line[arrow_at + len(_ARROW):]

    start = parse_timestamp(left)
    if start is None:
        column = len(left) - len(left.lstrip()) + 1
        return None, ParseError(line_no, "Invalid start timestamp.", column)

    end_token = right.split()[0] if right.split() else ""
    end = parse_timestamp(end_token) if end_token else None
    if end is None:
        offset = arrow_at + len(_ARROW)
        column = offset + len(right) - len(right.lstrip()) + 1
        return None, ParseError(line_no, "Invalid end timestamp.", column)

    if end <= start:
        return None, ParseError(
            line_no, "End timestamp is not greater than start timestamp."
        )
    return (start, end), None


def normalize_payload(payload: str) -> Tuple[Optional[str], str, str]:
    """Build (speaker, display_text, plain_text) from a cue payload.

    WHY: Both views need the same speaker decision but different markup.
    Exposed so that hosts that build cues themselves (e.g. from another
    caption source) get identical normalization.

    HOW: Line breaks become single spaces, the first voice tag is pulled
    out, then the remaining text is sanitized once per view.

    RULES:
    - display_text: ``<v Speaker>Speaker</v> `` followed by the content
      sanitized to b/i/v
    - plain_text: ``Speaker: `` followed by the markup-free content with
      character references (&amp;, &lt;, ...) decoded
    - No speaker: both texts are the sanitized content only
    """
    text = _LINE_BREAK_RE.sub(" ", payload)
    speaker, content = extract_voice(text)

    display = sanitize(content, DISPLAY_TAGS).strip()
    plain = html.unescape(sanitize(content, PLAIN_TAGS)).strip()

    if speaker:
        display = " ".join(
            part for part in ("<v {0}>{0}</v>".format(speaker), display) if part
        )
        plain = "{}: {}".format(speaker, plain) if plain else "{}:".format(speaker)
    return speaker, display, plain


def _log_errors(errors: List[ParseError]) -> None:
    for error in errors:
        logger.warning("Error in WebVTT file: %s", error)


def parse_captions(raw_text: str) -> ParseResult:
    """Parse WebVTT text into an ordered list of normalized cues.

    Args:
        raw_text: The complete caption file content.

    Returns:
        ParseResult with the accepted cues (possibly none) and every
        non-fatal problem found. An empty cue list is the "no content"
        condition; it is not signalled by an exception.
    """
    result = ParseResult()

    if not isinstance(raw_text, str):
        result.errors.append(ParseError(1, "Caption data is not text."))
        _log_errors(result.errors)
        return result

    text = raw_text[1:] if raw_text.startswith("\ufeff") else raw_text
    lines = _LINE_BREAK_RE.split(text)

    if not lines or not _SIGNATURE_RE.match(lines[0]):
        result.errors.append(ParseError(
            1, 'No valid signature. (File needs to start with "WEBVTT".)'
        ))
        _log_errors(result.errors)
        return result

    # Skip the header block: signature line plus anything up to a blank line
    first_body_line = 1
    while first_body_line < len(lines) and lines[first_body_line].strip():
        first_body_line += 1

    previous_start: Optional[float] = None

    for start_line, block in _split_blocks(lines, first_body_line):
        if _METADATA_BLOCK_RE.match(block[0]):
            continue

        identifier: Optional[str] = None
        timing_index = 0
        if _ARROW not in block[0]:
            if len(block) < 2:
                result.errors.append(ParseError(
                    start_line, "Cue identifier cannot be standalone."
                ))
                continue
            if _ARROW not in block[1]:
                result.errors.append(ParseError(
                    start_line + 1, "No timing line found for cue."
                ))
                continue
            identifier = block[0].strip()
            timing_index = 1

        timing_line_no = start_line + timing_index
        timing, error = _parse_timing(block[timing_index], timing_line_no)
        if error is not None:
            result.errors.append(error)
            continue
        start, end = timing

        if previous_start is not None and start < previous_start:
            result.errors.append(ParseError(
                timing_line_no,
                "Start timestamp is not greater than or equal to start "
                "timestamp of previous cue.",
            ))
            continue

        payload_lines = block[timing_index + 1:]
        if not payload_lines:
            result.errors.append(ParseError(timing_line_no, "Cue has no text."))
            continue

        raw = "\n".join(payload_lines)
        speaker, display_text, plain_text = normalize_payload(raw)

        result.cues.append(Cue(
            id=len(result.cues),
            start_time=start,
            end_time=end,
            raw_text=raw,
            display_text=display_text,
            plain_text=plain_text,
            speaker=speaker,
            identifier=identifier,
        ))
        previous_start = start

    _log_errors(result.errors)
    logger.debug(
        "Parsed %d cue(s) with %d error(s)", len(result.cues), len(result.errors)
    )
    return result
