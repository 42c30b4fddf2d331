"""Playback position tracking over push- and pull-based media sources.

WHY: Media players expose their position in two ways. Some notify on every
change (push); others only answer "where are you now?" (pull). The rest of
the library should not care which one it got: it wants one stream of
position changes, without repeats, so that each notification means real
work (an active-cue lookup, maybe a scroll).

HOW: PositionTracker inspects the *shape* of the source it was given —
a callable ``subscribe`` means push, a callable ``get_current_time`` means
pull — and either subscribes or schedules a repeating poll through an
asyncio-style scheduler (anything with ``call_later(delay, callback)``).
Every observed sample goes through handle_time(), which drops samples equal
to the last reported one and dispatches the rest to the registered
callbacks in order.

RULES:
- Push is preferred when a source offers both shapes
- The first valid sample always notifies; repeats never do
- Backward jumps (seeks) propagate like any other change
- Non-numeric, boolean and NaN samples are ignored
- start() and stop() are idempotent
- stop() from inside a callback prevents any further callback, including
  the remaining listeners of the current dispatch
- A missing or unusable source is not an error: start() returns False
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
from typing import Any, Callable, List, Optional, Protocol

from transcript_sync import config

logger = logging.getLogger(__name__)

TimeCallback = Callable[[float], None]


class PushPositionSource(Protocol):
    """Source that notifies on every position change."""

    def subscribe(self, on_time: TimeCallback) -> Callable[[], None]:
        """Register on_time; return a callable that unsubscribes it."""


class PullPositionSource(Protocol):
    """Source that must be polled for its position."""

    def get_current_time(self) -> float:
        """Return the current playback position in seconds."""


class Scheduler(Protocol):
    """The part of asyncio.AbstractEventLoop the poll timer needs."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Any:
        """Run callback after delay seconds; return a handle with cancel()."""


class SourceKind(str, enum.Enum):
    """How a position source delivers its position."""

    PUSH = "push"
    PULL = "pull"


def source_kind(source: Any) -> Optional[SourceKind]:
    """Classify a source by the operations it offers, or None if unusable."""
    if source is None:
        return None
    if callable(getattr(source, "subscribe", None)):
        return SourceKind.PUSH
    if callable(getattr(source, "get_current_time", None)):
        return SourceKind.PULL
    return None


def _is_valid_time(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


class PositionTracker:
    """Turns a media position source into de-duplicated change notifications.

    WHY: Downstream consumers (the snippet lookup, the renderer) should run
    once per real position change, no matter how chatty the source is.

    HOW: See module docstring. The poll timer reschedules itself after each
    tick while tracking is active; stop() cancels the pending handle.

    RULES:
    - poll_interval_ms defaults to config.POLL_INTERVAL_MS (250 ms)
    - scheduler defaults to the running asyncio loop at start() time
    - The last reported time survives stop()/start(), so restarting on the
      same position does not notify again
    """

    def __init__(
        self,
        source: Any = None,
        *,
        poll_interval_ms: Optional[float] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._source = source
        if poll_interval_ms is None or poll_interval_ms <= 0:
            poll_interval_ms = config.POLL_INTERVAL_MS
        self._poll_interval_s = poll_interval_ms / 1000.0
        self._scheduler = scheduler
        self._callbacks: List[TimeCallback] = []
        self._tracking = False
        self._kind: Optional[SourceKind] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._timer: Any = None
        self._active_scheduler: Optional[Scheduler] = None
        self._previous_time: Optional[float] = None

    # -- properties ------------------------------------------------------

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    @property
    def kind(self) -> Optional[SourceKind]:
        """Shape of the source currently tracked, None when idle."""
        return self._kind

    @property
    def poll_interval_ms(self) -> float:
        return self._poll_interval_s * 1000.0

    @property
    def last_time(self) -> Optional[float]:
        return self._previous_time

    # -- listeners -------------------------------------------------------

    def on_change(self, callback: TimeCallback) -> Callable[[], None]:
        """Register a position-changed callback; returns a remover."""
        self._callbacks.append(callback)

        def _remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _remove

    # -- lifecycle -------------------------------------------------------

    def start(self) -> bool:
        """Start tracking.

        Returns:
            True when tracking (or already tracking), False when there is
            no usable source or no scheduler to poll with.
        """
        if self._tracking:
            return True

        kind = source_kind(self._source)
        if kind is None:
            logger.warning("No usable position source; tracking not started")
            return False

        if kind is SourceKind.PUSH:
            self._tracking = True
            self._kind = kind
            unsubscribe = self._source.subscribe(self.handle_time)
            self._unsubscribe = unsubscribe if callable(unsubscribe) else None
            logger.debug("Tracking push position source")
            return True

        scheduler = self._scheduler
        if scheduler is None:
            try:
                scheduler = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning(
                    "No running event loop to poll the position source; "
                    "tracking not started"
                )
                return False

        self._tracking = True
        self._kind = kind
        self._active_scheduler = scheduler
        self._schedule_poll()
        logger.debug(
            "Polling position source every %.0f ms", self._poll_interval_s * 1000
        )
        return True

    def stop(self) -> None:
        """Stop tracking; releases the poll timer and the subscription."""
        if not self._tracking:
            return
        self._tracking = False
        self._kind = None

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._active_scheduler = None

        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()
        logger.debug("Position tracking stopped")

    # -- polling ---------------------------------------------------------

    def _schedule_poll(self) -> None:
        self._timer = self._active_scheduler.call_later(
            self._poll_interval_s, self._tick
        )

    def _tick(self) -> None:
        self._timer = None
        if not self._tracking:
            return
        self.poll()
        # a callback may have restarted tracking, which schedules its own timer
        if self._tracking and self._timer is None and self._active_scheduler is not None:
            self._schedule_poll()

    def poll(self) -> None:
        """Read a pull source once and handle the sample."""
        reader = getattr(self._source, "get_current_time", None)
        if not callable(reader):
            return
        try:
            current = reader()
        except Exception:
            logger.exception("Position source failed to report its time")
            return
        self.handle_time(current)

    # -- samples ---------------------------------------------------------

    def handle_time(self, current_time: Any) -> None:
        """Report a sample; notifies callbacks if it differs from the last one."""
        if not self._tracking:
            return
        if not _is_valid_time(current_time):
            return
        if current_time == self._previous_time:
            return

        self._previous_time = current_time
        for callback in list(self._callbacks):
            if not self._tracking:
                break
            callback(current_time)

    # -- seeking ---------------------------------------------------------

    def seek(self, time: Any) -> bool:
        """Ask the source to jump to ``time``; False if it cannot seek."""
        if not _is_valid_time(time) or time < 0:
            return False
        seek = getattr(self._source, "seek", None)
        if not callable(seek):
            return False
        seek(float(time))
        return True
