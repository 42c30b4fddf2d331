"""Markup sanitizing and voice-tag extraction for cue payloads.

WHY: WebVTT cue text carries inline markup (<b>, <i>, <u>, <c.class>,
<v Speaker>, <lang>, <ruby>, inline timestamps). The interactive view may
only render a small allow-list of it, the plaintext view none of it, and
the speaker of a cue is announced by a leading voice tag. Everything that
is not explicitly allowed must go, without ever touching the text content.

HOW: Tag-like tokens ("<" ... ">") are scanned left to right. Tokens that
parse as a well-formed tag are kept when their name is allowed and dropped
otherwise; tokens that do not parse as a tag stay as literal text. Kept tags
are then balanced: stray closing tags are dropped, mis-nested tags are closed
in order, unclosed tags are closed at the end. The pass is repeated until
the text stops changing, which makes sanitize() idempotent even when
removing a tag glues two fragments into a new tag-like token.

RULES:
- Text outside tags is never modified
- Tag names compare case-sensitively (WebVTT tag names are lowercase)
- Inline timestamps (<00:00:01.000>) are markup and are never allowed
- Never raises; non-string input yields ""
- extract_voice() only considers a voice tag that names a speaker and
  leads the payload (leading whitespace allowed)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

DISPLAY_TAGS = frozenset({"b", "i", "v"})
"""Tags the interactive (decorated) view is allowed to render."""

PLAIN_TAGS: frozenset = frozenset()
"""The plaintext view renders no markup at all."""

# Any run between "<" and the next ">" that contains neither bracket.
_TOKEN_RE = re.compile(r"<[^<>]*>")

# A well-formed tag: optional "/", a name, optional ".class" parts, optional
# annotation after whitespace, optional self-closing "/".
_TAG_RE = re.compile(
    r"^<(/?)([A-Za-z][A-Za-z0-9]*)((?:\.[^\s.<>/]+)*)(?:[ \t]+[^<>]*?)?[ \t]*(/?)>$"
)

_INLINE_TIMESTAMP_RE = re.compile(r"^<(?:\d{2,}:)?\d{2}:\d{2}\.\d{3}>$")

# Voice tag with a speaker annotation: <v Speaker> or <v.class1.class2 Speaker>
_VOICE_RE = re.compile(r"<v(?:\.[^\s.<>]+)*[ \t]+([^<>]*[^\s<>])[ \t]*>")

_VOICE_CLOSE = "</v>"


@dataclass(frozen=True)
class _Tag:
    """A kept tag token during a sanitize pass."""

    text: str
    name: str
    closing: bool
    self_closing: bool


def _parse_tag(token: str) -> Optional[Tuple[str, bool, bool]]:
    """Return (name, closing, self_closing) for a well-formed tag token."""
    if _INLINE_TIMESTAMP_RE.match(token):
        return "", False, True
    match = _TAG_RE.match(token)
    if not match:
        return None
    slash, name, _classes, self_close = match.groups()
    return name, bool(slash), bool(self_close)


def is_markup(token: str) -> bool:
    """True when a ``<...>`` token is a tag rather than literal text."""
    return _parse_tag(token) is not None


def _balance(pieces: List[Union[str, _Tag]]) -> str:
    """Render pieces, dropping stray closers and closing unclosed tags."""
    out: List[str] = []
    stack: List[str] = []
    for piece in pieces:
        if isinstance(piece, str):
            out.append(piece)
            continue
        if piece.self_closing:
            out.append(piece.text)
            continue
        if not piece.closing:
            stack.append(piece.name)
            out.append(piece.text)
            continue
        if piece.name not in stack:
            continue  # stray closing tag
        while stack:
            name = stack.pop()
            out.append("</{}>".format(name))
            if name == piece.name:
                break
    while stack:
        out.append("</{}>".format(stack.pop()))
    return "".join(out)


def _sanitize_pass(text: str, allowed: frozenset) -> str:
    pieces: List[Union[str, _Tag]] = []
    pos = 0
    for match in _TOKEN_RE.finditer(text):
        pieces.append(text[pos:match.start()])
        token = match.group(0)
        parsed = _parse_tag(token)
        if parsed is None:
            pieces.append(token)  # not a tag, keep as literal text
        else:
            name, closing, self_closing = parsed
            if name and name in allowed:
                pieces.append(_Tag(token, name, closing, self_closing))
        pos = match.end()
    pieces.append(text[pos:])
    return _balance(pieces)


def sanitize(text: str, allowed_tags: Iterable[str] = PLAIN_TAGS) -> str:
    """Remove every markup tag whose name is not in allowed_tags.

    Args:
        text: Cue payload, possibly containing WebVTT markup.
        allowed_tags: Tag names to keep (e.g. DISPLAY_TAGS).

    Returns:
        The sanitized text. Applying sanitize() again with the same
        allow-list returns the same string.
    """
    if not isinstance(text, str):
        return ""
    allowed = frozenset(allowed_tags or ())
    current = text
    while True:
        cleaned = _sanitize_pass(current, allowed)
        if cleaned == current:
            return cleaned
        current = cleaned


def extract_voice(text: str) -> Tuple[Optional[str], str]:
    """Find the leading voice tag naming a speaker and remove it.

    WHY: A voice tag opening the cue says who is speaking. Both views
    render the speaker separately from the spoken text, so the tag itself
    (and the closing tag that ends it) must leave the content.

    HOW: Match ``<v[.classes] Speaker>`` at the start of the payload (after
    any whitespace); cut it out along with the first ``</v>`` after it.

    RULES:
    - Only a leading tag counts; later voice tags stay in the text
    - ``<v>`` without a name is not a speaker tag
    - Returns (None, text) unchanged when no speaker tag exists

    Returns:
        (speaker, text_without_tag)
    """
    if not isinstance(text, str):
        return None, ""
    match = _VOICE_RE.match(text, len(text) - len(text.lstrip()))
    if not match:
        return None, text
    speaker = match.group(1).strip()
    before = text[:match.start()]
    after = text[match.end():]
    close_at = after.find(_VOICE_CLOSE)
    if close_at != -1:
        after = after[:close_at] + after[close_at + len(_VOICE_CLOSE):]
    return speaker, before + after
