"""Transcript Sync — caption-track transcripts synchronized with media playback.

WHY: A transcript is only useful next to its audio/video if it follows
along: the current caption should be highlighted as the media plays, the
reader should be able to search it, and the viewer should be able to switch
between an interactive and a plaintext view. This package holds the logic
for all of that, independent of any rendering technology.

HOW: Four stages — parse (WebVTT text → normalized Cue list), index
(playback position → active cue), track (media position source → de-duplicated
position updates) and present (five-toggle state machine). The session
module wires them together behind a small renderer callback contract.

RULES:
- The core never raises on malformed external input
- Renderers receive frozen snapshots, never mutable state
- Every output format consumes the same Cue list
"""

__version__ = "0.1.0"
