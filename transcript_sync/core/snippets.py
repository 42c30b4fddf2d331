"""Active-cue lookup by playback position.

WHY: On every position update (several times per second) the viewer has
to know which cue is "current" so it can highlight and scroll to it. A
linear scan over a long transcript on every tick is wasteful, and the
answer must be deterministic even when cues overlap.

HOW: Start times are kept in a sorted list and searched with bisect. The
candidate is the last cue whose start is at or before the position. A
running maximum of end times lets the lookup walk back over overlapping
cues and stop as soon as no earlier cue can still be running.

RULES:
- Active means start_time <= time < end_time
- Overlapping cues: the cue with the latest start_time wins; equal starts
  resolve to the later cue in file order
- A position in a gap between cues has no active cue
- Non-numeric, boolean or NaN positions have no active cue
"""

from __future__ import annotations

import bisect
import math
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from transcript_sync.core.ir import Cue, Snippet
from transcript_sync.core.timecode import clock_label


class SnippetIndex:
    """Ordered, searchable view of a parsed cue list."""

    def __init__(self, cues: Iterable[Cue] = ()) -> None:
        self._cues: Tuple[Cue, ...] = ()
        self._starts: List[float] = []
        self._max_ends: List[float] = []
        self._by_id: Dict[int, Cue] = {}
        self.rebuild(cues)

    def rebuild(self, cues: Iterable[Cue]) -> None:
        """Replace the indexed cues (e.g. after a new caption file loaded)."""
        # sorted() is stable: equal start times keep file order
        ordered = tuple(sorted(cues, key=lambda cue: cue.start_time))
        self._cues = ordered
        self._starts = [cue.start_time for cue in ordered]
        self._by_id = {cue.id: cue for cue in ordered}

        self._max_ends = []
        running = -math.inf
        for cue in ordered:
            running = max(running, cue.end_time)
            self._max_ends.append(running)

    def find_active(self, time: float) -> Optional[int]:
        """Return the id of the cue active at ``time``, or None."""
        if isinstance(time, bool) or not isinstance(time, (int, float)):
            return None
        if math.isnan(time):
            return None

        index = bisect.bisect_right(self._starts, time) - 1
        while index >= 0 and self._max_ends[index] > time:
            cue = self._cues[index]
            if time < cue.end_time:
                return cue.id
            index -= 1
        return None

    def find_by_id(self, cue_id: int) -> Optional[Cue]:
        return self._by_id.get(cue_id)

    def all(self) -> Tuple[Cue, ...]:
        return self._cues

    def snippet(self, cue_id: int, timestamp: bool = False) -> Optional[Snippet]:
        """Build the interactive-view snippet for a cue.

        Args:
            cue_id: Id of the cue.
            timestamp: When True, the snippet carries a clock label of the
                cue's start time for timestamp decoration.
        """
        cue = self._by_id.get(cue_id)
        if cue is None:
            return None
        return Snippet(
            cue_id=cue.id,
            start_time=cue.start_time,
            end_time=cue.end_time,
            text=cue.display_text,
            speaker=cue.speaker,
            timestamp=clock_label(cue.start_time) if timestamp else None,
        )

    def __len__(self) -> int:
        return len(self._cues)

    def __iter__(self) -> Iterator[Cue]:
        return iter(self._cues)
