"""Shared test fixtures for the transcript_sync test suite.

WHY: Most test modules need the same small, realistic caption file: a
header, a comment block, a voice-tagged cue, a cue with an identifier and
cue settings, and a multi-line cue with unsupported markup. Centralizing
it keeps the expected texts in one place.

HOW: SAMPLE_VTT is the raw file; the fixtures hand out the text, the
parsed cue list, and a file written to tmp_path.

RULES:
- SAMPLE_VTT parses without errors into exactly three cues
- Expected display/plain texts below match SAMPLE_VTT exactly
"""

from pathlib import Path

import pytest

from transcript_sync.core.parser import parse_captions


SAMPLE_VTT = """WEBVTT
Kind: captions
Language: en

NOTE This comment block is not a cue

00:00:00.000 --> 00:00:05.000
<v Alice>Hello <b>world</b></v>

intro-2
00:00:05.000 --> 00:00:10.000 align:start position:10%
This is <i>a</i> test &amp; more

00:00:12.000 --> 00:00:15.500
<c.yellow>Final</c> line
split here
"""

SAMPLE_DISPLAY = [
    "<v Alice>Alice</v> Hello <b>world</b>",
    "This is <i>a</i> test &amp; more",
    "Final line split here",
]

SAMPLE_PLAIN = [
    "Alice: Hello world",
    "This is a test & more",
    "Final line split here",
]


@pytest.fixture
def sample_vtt() -> str:
    return SAMPLE_VTT


@pytest.fixture
def sample_display():
    """Expected Cue.display_text of the SAMPLE_VTT cues."""
    return list(SAMPLE_DISPLAY)


@pytest.fixture
def sample_plain():
    """Expected Cue.plain_text of the SAMPLE_VTT cues."""
    return list(SAMPLE_PLAIN)


@pytest.fixture
def sample_cues():
    """The three cues parsed from SAMPLE_VTT."""
    result = parse_captions(SAMPLE_VTT)
    assert not result.errors
    return result.cues


@pytest.fixture
def sample_vtt_file(tmp_path) -> Path:
    path = tmp_path / "lecture.vtt"
    path.write_text(SAMPLE_VTT, encoding="utf-8")
    return path
