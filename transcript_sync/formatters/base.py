"""Abstract base formatter and output container.

WHY: Every view of a transcript (caption file, plaintext, interactive
snippets) consumes the same parsed cue list but produces different
content. This base class enforces a consistent interface so the CLI, the
session and host adapters can work with any formatter generically.

HOW: BaseFormatter is an ABC with two requirements — a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list; every current formatter returns one item
- ``suffix`` is appended to the source stem, e.g. ``"-transcript.txt"``
- Formatters never modify the cues they are given
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from transcript_sync.core.ir import Cue


@dataclass
class FormatterOutput:
    """One output produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-transcript.txt"`` → ``"lecture-transcript.txt"``.
        content: The rendered content.
        media_type: MIME type for the content, e.g. ``"text/vtt"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all transcript formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Plain Text'."""

    @abstractmethod
    def format(self, cues: Sequence[Cue]) -> list[FormatterOutput]:
        """Render the cue list.

        Args:
            cues: Parsed cues in start-time order.

        Returns:
            List of FormatterOutput objects.
        """
