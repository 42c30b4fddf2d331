"""Schema for the persisted presentation state (session resume).

WHY: Hosts store the presentation state between sessions and hand it back
when the viewer is rebuilt. What comes back is untrusted: it may be from an
older version of the library (which used isVisible / isInteractive /
isAutoScrollActive), hand-edited, or partially corrupt. A bad field must
not break the viewer or poison the other fields.

HOW: A pydantic model with five strict booleans describes the persisted
layout. load_snapshot() validates the whole record first and, if that
fails, validates field by field so that only the broken fields fall back
to their defaults.

RULES:
- The layout is exactly five booleans, nothing else (no cues, no query)
- Unknown keys are ignored on load and never written
- Strict booleans: 1, "true", "yes" are not booleans
- load_snapshot() never raises
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, ValidationError

from transcript_sync.core.ir import PresentationState

logger = logging.getLogger(__name__)


class StateSnapshot(BaseModel):
    """Persisted presentation state."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"additionalProperties": False},
    )

    visible: StrictBool = Field(
        default=True,
        validation_alias=AliasChoices("visible", "isVisible"),
        description="Transcript shown",
    )
    interactive: StrictBool = Field(
        default=True,
        validation_alias=AliasChoices("interactive", "isInteractive"),
        description="Interactive view (True) or plaintext view (False)",
    )
    autoscroll: StrictBool = Field(
        default=True,
        validation_alias=AliasChoices("autoscroll", "isAutoScrollActive"),
        description="Scroll the active snippet into view",
    )
    timestamp: StrictBool = Field(
        default=False,
        description="Decorate snippets with their start time",
    )
    linebreaks: StrictBool = Field(
        default=False,
        description="One cue per line in the plaintext view",
    )

    def to_state(self) -> PresentationState:
        return PresentationState(**self.model_dump())


def _validate_leniently(payload: Dict[str, Any]) -> StateSnapshot:
    try:
        return StateSnapshot.model_validate(payload)
    except ValidationError:
        pass

    accepted: Dict[str, Any] = {}
    for key, value in payload.items():
        try:
            StateSnapshot.model_validate({key: value})
        except ValidationError:
            logger.debug("Ignoring invalid state field %r=%r", key, value)
            continue
        accepted[key] = value
    return StateSnapshot.model_validate(accepted)


def load_snapshot(data: Any) -> PresentationState:
    """Turn persisted data into a PresentationState.

    Args:
        data: A PresentationState, a mapping, or a JSON object string.

    Returns:
        The state; any field that is missing or invalid has its default.
    """
    if isinstance(data, PresentationState):
        return data
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError:
            logger.debug("Ignoring unparseable state snapshot")
            return PresentationState()
    if not isinstance(data, Mapping):
        logger.debug("Ignoring state snapshot of type %s", type(data).__name__)
        return PresentationState()
    return _validate_leniently(dict(data)).to_state()


def dump_snapshot(state: PresentationState) -> Dict[str, bool]:
    """Serialize a state to the persisted layout."""
    return StateSnapshot.model_validate(state.to_dict()).model_dump()


def snapshot_json_schema() -> Dict[str, Any]:
    """JSON Schema of the persisted layout (as written by dump_snapshot)."""
    return StateSnapshot.model_json_schema(mode="serialization")
