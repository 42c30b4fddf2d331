"""Intermediate representation dataclasses for parsed transcripts.

WHY: The caption track arrives as WebVTT text, but the snippet index,
the search highlighter, the formatters and the renderer all need the same
structured view of it: timed units with normalized text in two flavours
(decorated and plain). The IR is the single contract between parsing and
everything downstream.

HOW: Plain dataclasses:
  Cue          — one caption unit with timing, speaker and normalized text
  ParseError   — one non-fatal problem found while parsing
  ParseResult  — the cues plus the accumulated errors
  SearchMatch  — one highlight span inside a cue's display text
  Snippet      — one cue as the interactive renderer shows it
  PresentationState — the five presentation toggles

RULES:
- All times are float seconds
- Cue.id is the 0-based ordinal of the accepted cue, never reused
- Cues in a ParseResult are in non-decreasing start_time order
- SearchMatch offsets index Cue.display_text; end_offset is exclusive
- An empty ParseResult is a "no content" condition, not an exception
"""

from __future__ import annotations

from dataclasses import dataclass, field


class NoContentError(Exception):
    """Raised by ParseResult.raise_for_content() when no cue could be parsed.

    WHY: Some callers (the CLI, batch scripts) prefer an exception to
    checking ``is_empty``. The core itself never raises this — the session
    reports the condition through Renderer.on_no_content() instead.

    RULES:
    - Terminal for the current input: show a fallback message, do not retry
    - Carries the parse errors that explain why nothing was accepted
    """

    def __init__(self, errors: list[ParseError] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(
            "No valid cues found ({} parse error(s))".format(len(self.errors))
        )


@dataclass(frozen=True)
class Cue:
    """A single timed caption unit.

    RULES:
    - id: ordinal assigned at parse time
    - start_time < end_time
    - raw_text: payload lines as written in the file, joined with "\\n"
    - speaker: name from the first voice tag, or None
    - display_text: markup limited to b/i/v, speaker split applied
    - plain_text: no markup, "Speaker: " prefix when speaker is set
    - identifier: the optional WebVTT cue identifier line
    """

    id: int
    start_time: float
    end_time: float
    raw_text: str
    display_text: str
    plain_text: str
    speaker: str | None = None
    identifier: str | None = None


@dataclass(frozen=True)
class ParseError:
    """A malformed construct found while parsing; parsing continued past it."""

    line: int
    message: str
    column: int | None = None

    def __str__(self) -> str:
        location = ["line {}".format(self.line)]
        if self.column:
            location.append("column {}".format(self.column))
        return "{} ({})".format(self.message, ", ".join(location))


@dataclass
class ParseResult:
    """Outcome of parsing one caption track."""

    cues: list[Cue] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.cues

    def raise_for_content(self) -> None:
        """Raise NoContentError if no cue was accepted."""
        if self.is_empty:
            raise NoContentError(self.errors)


@dataclass(frozen=True)
class SearchMatch:
    cue_id: int
    start_offset: int
    end_offset: int


@dataclass(frozen=True)
class Snippet:
    """A cue as shown by the interactive view.

    timestamp is a clock label ("01:05") when timestamp decoration is
    requested, otherwise None.
    """

    cue_id: int
    start_time: float
    end_time: float
    text: str
    speaker: str | None = None
    timestamp: str | None = None


@dataclass(frozen=True)
class PresentationState:
    """The five presentation toggles as one immutable value.

    WHY: The state machine owns the live state; everybody else gets one of
    these. Being frozen, a snapshot can be handed out freely and never
    changes behind the owner's back.

    RULES:
    - Defaults: visible, interactive and autoscroll on; timestamp and
      linebreaks off
    - to_dict() is the persisted layout: exactly these five booleans
    """

    visible: bool = True
    interactive: bool = True
    autoscroll: bool = True
    timestamp: bool = False
    linebreaks: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "visible": self.visible,
            "interactive": self.interactive,
            "autoscroll": self.autoscroll,
            "timestamp": self.timestamp,
            "linebreaks": self.linebreaks,
        }
