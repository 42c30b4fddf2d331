"""Presentation state machine for the five transcript toggles.

WHY: The viewer has five on/off switches, but they are not independent.
A hidden transcript has nothing to switch to plaintext, scroll or
decorate; a plaintext view has no active snippet to scroll to and no
snippets to stamp with times. Letting every control flip its own field
would let the renderer show combinations that make no sense and lose the
user's preferences when a gate closes.

HOW: PresentationStateMachine stores the five values and derives an
"enabled" flag per toggle from the gates:
  visible     — always enabled, gates everything else
  interactive — enabled while visible
  linebreaks  — enabled while visible
  autoscroll  — enabled while visible and interactive
  timestamp   — enabled while visible and interactive
A transition on a disabled toggle is rejected; the stored value stays as
it was, so it is back in force once the gate opens again.

RULES:
- Only real bools are accepted (not 0/1, not "true"); anything else is
  ignored silently, never raised
- Rejected and no-op transitions do not notify listeners
- Listeners receive a frozen PresentationState, never the machine
- restore() validates like a persisted snapshot and recomputes the
  derived flags; reset() returns to the defaults
"""

from __future__ import annotations

import enum
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from transcript_sync.core.ir import PresentationState
from transcript_sync.core.snapshot import load_snapshot

logger = logging.getLogger(__name__)

StateCallback = Callable[[PresentationState], None]


class Toggle(str, enum.Enum):
    """The five presentation toggles; values match PresentationState fields."""

    VISIBLE = "visible"
    INTERACTIVE = "interactive"
    AUTOSCROLL = "autoscroll"
    TIMESTAMP = "timestamp"
    LINEBREAKS = "linebreaks"


# Toggles that must be on for a toggle to be enabled.
_GATES: Dict[Toggle, tuple] = {
    Toggle.VISIBLE: (),
    Toggle.INTERACTIVE: (Toggle.VISIBLE,),
    Toggle.LINEBREAKS: (Toggle.VISIBLE,),
    Toggle.AUTOSCROLL: (Toggle.VISIBLE, Toggle.INTERACTIVE),
    Toggle.TIMESTAMP: (Toggle.VISIBLE, Toggle.INTERACTIVE),
}


def _coerce_toggle(toggle: Any) -> Optional[Toggle]:
    try:
        return Toggle(toggle)
    except (TypeError, ValueError):
        return None


class PresentationStateMachine:
    """Exclusive owner of the live presentation state."""

    def __init__(self, initial: Any = None) -> None:
        """Create the machine with defaults or a restored snapshot.

        Args:
            initial: Optional PresentationState, mapping or JSON string from
                a previous session; invalid fields fall back to defaults.
        """
        self._state = PresentationState() if initial is None else load_snapshot(initial)
        self._enabled: Dict[Toggle, bool] = {}
        self._listeners: List[StateCallback] = []
        self._recompute()

    # -- queries ---------------------------------------------------------

    @property
    def state(self) -> PresentationState:
        return self._state

    def snapshot(self) -> PresentationState:
        """Independent copy of the current state."""
        return replace(self._state)

    def value(self, toggle: Toggle) -> bool:
        """Stored value of a toggle, regardless of whether it is enabled."""
        coerced = _coerce_toggle(toggle)
        if coerced is None:
            return False
        return getattr(self._state, coerced.value)

    def is_enabled(self, toggle: Toggle) -> bool:
        """Whether the control for ``toggle`` currently accepts changes."""
        coerced = _coerce_toggle(toggle)
        if coerced is None:
            return False
        return self._enabled[coerced]

    def enabled(self) -> Dict[str, bool]:
        """Enabled flag per toggle, keyed by toggle name."""
        return {toggle.value: flag for toggle, flag in self._enabled.items()}

    # -- listeners -------------------------------------------------------

    def on_change(self, callback: StateCallback) -> Callable[[], None]:
        """Register a state-changed callback; returns a remover."""
        self._listeners.append(callback)

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _remove

    # -- transitions -----------------------------------------------------

    def set(self, toggle: Any, value: Any) -> bool:
        """Apply a transition.

        Returns:
            True if the toggle now holds ``value``; False if the input was
            invalid or the toggle is disabled.
        """
        coerced = _coerce_toggle(toggle)
        if coerced is None:
            logger.debug("Ignoring unknown toggle %r", toggle)
            return False
        if not isinstance(value, bool):
            logger.debug("Ignoring non-boolean value %r for %s", value, coerced.value)
            return False
        if not self._enabled[coerced]:
            logger.debug("Rejecting %s=%s while disabled", coerced.value, value)
            return False
        if getattr(self._state, coerced.value) == value:
            return True

        self._apply(replace(self._state, **{coerced.value: value}))
        return True

    def toggle(self, toggle: Any) -> bool:
        """Flip a toggle (a button press); False if it is disabled."""
        coerced = _coerce_toggle(toggle)
        if coerced is None:
            return False
        return self.set(coerced, not getattr(self._state, coerced.value))

    def set_visible(self, value: Any) -> bool:
        return self.set(Toggle.VISIBLE, value)

    def set_interactive(self, value: Any) -> bool:
        return self.set(Toggle.INTERACTIVE, value)

    def set_autoscroll(self, value: Any) -> bool:
        return self.set(Toggle.AUTOSCROLL, value)

    def set_timestamp(self, value: Any) -> bool:
        return self.set(Toggle.TIMESTAMP, value)

    def set_linebreaks(self, value: Any) -> bool:
        return self.set(Toggle.LINEBREAKS, value)

    def restore(self, snapshot: Any) -> PresentationState:
        """Resume a previous session's state.

        The snapshot is validated like persisted data, then the derived
        enabled flags are recomputed from the restored values.
        """
        self._apply(load_snapshot(snapshot))
        return self._state

    def reset(self) -> PresentationState:
        """Return to the default state."""
        self._apply(PresentationState())
        return self._state

    # -- internals -------------------------------------------------------

    def _recompute(self) -> None:
        self._enabled = {
            toggle: all(getattr(self._state, gate.value) for gate in gates)
            for toggle, gates in _GATES.items()
        }

    def _apply(self, new_state: PresentationState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        self._recompute()
        for listener in list(self._listeners):
            listener(self._state)
