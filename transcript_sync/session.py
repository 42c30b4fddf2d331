"""Transcript session — wires parsing, tracking, lookup and state together.

WHY: A host page embeds one transcript next to one media player. It should
not have to know that a position update means "look up the active cue and
tell the renderer only if it changed", or that a new caption file means
"rebuild the index and re-run the current search". The session is the one
object the host talks to; the renderer only implements callbacks.

HOW: TranscriptSession owns a SnippetIndex, a PositionTracker and a
PresentationStateMachine. Tracker notifications run the active-cue lookup;
state changes and search results are forwarded to the Renderer. Renderer
is a base class whose callbacks do nothing, so renderers override only
what they display.

RULES:
- Renderer callbacks fire only on change (active snippet, state)
- No content is reported through on_no_content(), never raised
- Parse errors are reported (and logged) even when some cues were accepted
- A new caption file resets the active snippet and re-runs the search
- The persisted state is the five booleans of get_current_state()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import httpx

from transcript_sync import config
from transcript_sync.core.ir import (
    Cue,
    ParseError,
    ParseResult,
    PresentationState,
    SearchMatch,
    Snippet,
)
from transcript_sync.core.parser import parse_captions
from transcript_sync.core.search import compute_matches
from transcript_sync.core.snapshot import dump_snapshot
from transcript_sync.core.snippets import SnippetIndex
from transcript_sync.core.state import PresentationStateMachine
from transcript_sync.core.tracker import PositionTracker, Scheduler, source_kind
from transcript_sync.formatters.plain_text import join_plain_text
from transcript_sync.loader import fetch_caption_text

logger = logging.getLogger(__name__)


class Renderer:
    """Callback contract consumed by the external UI.

    Every method is a no-op here; subclass and override what you render.
    """

    def on_active_snippet_changed(self, cue_id: Optional[int]) -> None:
        """The highlighted snippet changed (None: nothing active)."""

    def on_state_changed(self, state: PresentationState) -> None:
        """The presentation state changed."""

    def on_search_matches(self, matches: List[SearchMatch]) -> None:
        """New highlight spans; an empty list clears highlighting."""

    def on_parse_errors(self, errors: List[ParseError]) -> None:
        """The caption file had problems (parsing continued past them)."""

    def on_no_content(self) -> None:
        """The caption file yielded no cue; show a fallback message."""


class TranscriptSession:
    """One transcript synchronized with one media position source."""

    def __init__(
        self,
        renderer: Optional[Renderer] = None,
        *,
        source: Any = None,
        previous_state: Any = None,
        poll_interval_ms: Optional[float] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        """
        Args:
            renderer: Receives the session's notifications.
            source: Media position source (push or pull shape), optional.
            previous_state: Persisted state from an earlier session.
            poll_interval_ms: Poll interval for pull sources.
            scheduler: Timer scheduler for polling (default: running loop).
        """
        self.renderer = renderer or Renderer()
        self._source = source
        self.index = SnippetIndex()
        self.state_machine = PresentationStateMachine(previous_state)
        self.tracker = PositionTracker(
            source, poll_interval_ms=poll_interval_ms, scheduler=scheduler,
        )
        self._active_cue_id: Optional[int] = None
        self._query = ""
        self._matches: List[SearchMatch] = []
        self._has_content = False
        self._loaded = False

        self.state_machine.on_change(self.renderer.on_state_changed)
        self.tracker.on_change(self.handle_time)

    # -- properties ------------------------------------------------------

    @property
    def active_cue_id(self) -> Optional[int]:
        return self._active_cue_id

    @property
    def cues(self) -> Sequence[Cue]:
        return self.index.all()

    @property
    def has_content(self) -> bool:
        return self._has_content

    @property
    def matches(self) -> List[SearchMatch]:
        return list(self._matches)

    @property
    def state(self) -> PresentationState:
        return self.state_machine.snapshot()

    @property
    def status_message(self) -> Optional[str]:
        """Fallback text for the host to show instead of the transcript.

        None when there is a transcript with cues and a usable media source.
        """
        if not self._loaded:
            return config.NO_TRANSCRIPT_MESSAGE
        if not self._has_content:
            return config.TROUBLE_WEBVTT_MESSAGE
        if source_kind(self._source) is None:
            return config.NO_MEDIUM_MESSAGE
        return None

    # -- loading ---------------------------------------------------------

    def load(self, raw_text: str) -> ParseResult:
        """Parse caption text and make it the session's transcript."""
        result = parse_captions(raw_text)
        if result.errors:
            self.renderer.on_parse_errors(list(result.errors))

        self.index.rebuild(result.cues)
        self._loaded = True
        self._has_content = not result.is_empty
        self._set_active(None)

        if result.is_empty:
            logger.warning("Transcript has no valid cues")
            self._query_matches([])
            self.renderer.on_no_content()
            return result

        logger.info("Loaded transcript with %d cue(s)", len(result.cues))
        if self.tracker.last_time is not None:
            self._set_active(self.index.find_active(self.tracker.last_time))
        if self._query:
            self.search(self._query)
        return result

    async def load_from(
        self,
        location: Union[str, Path],
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> ParseResult:
        """Fetch a caption file and load it.

        Raises:
            TranscriptLoadError: If the file cannot be downloaded or read.
        """
        text = await fetch_caption_text(location, client=client)
        return self.load(text)

    # -- tracking --------------------------------------------------------

    def start(self) -> bool:
        """Start following the media position; False if there is no source."""
        return self.tracker.start()

    def stop(self) -> None:
        self.tracker.stop()

    def handle_time(self, time: float) -> None:
        """Position changed: update the active snippet."""
        self._set_active(self.index.find_active(time))

    def seek(self, time: Any) -> bool:
        """Move the media to ``time`` (e.g. a snippet was clicked)."""
        return self.tracker.seek(time)

    def seek_to_cue(self, cue_id: int) -> bool:
        cue = self.index.find_by_id(cue_id)
        if cue is None:
            return False
        return self.seek(cue.start_time)

    def _set_active(self, cue_id: Optional[int]) -> None:
        if cue_id == self._active_cue_id:
            return
        self._active_cue_id = cue_id
        self.renderer.on_active_snippet_changed(cue_id)

    # -- search ----------------------------------------------------------

    def search(self, query: Any) -> List[SearchMatch]:
        """Highlight ``query``; an empty query clears all highlighting."""
        self._query = query if isinstance(query, str) else ""
        matches = compute_matches(self.index.all(), self._query)
        self._query_matches(matches)
        return list(matches)

    def _query_matches(self, matches: List[SearchMatch]) -> None:
        if not matches and not self._matches:
            return
        self._matches = list(matches)
        self.renderer.on_search_matches(list(matches))

    # -- views -----------------------------------------------------------

    def snippet(self, cue_id: int) -> Optional[Snippet]:
        """Interactive-view snippet, decorated when timestamps are on."""
        state = self.state_machine.state
        decorate = state.timestamp and self.state_machine.is_enabled("timestamp")
        return self.index.snippet(cue_id, timestamp=decorate)

    def plaintext(self) -> str:
        """The plaintext view, honouring the line-breaks toggle."""
        return join_plain_text(self.index.all(), self.state_machine.state.linebreaks)

    # -- state -----------------------------------------------------------

    def get_current_state(self) -> dict:
        """State to persist for resuming this session later."""
        return dump_snapshot(self.state_machine.state)

    def reset(self) -> None:
        """Back to the default presentation and no search."""
        self.state_machine.reset()
        self.search("")
