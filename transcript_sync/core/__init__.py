"""Core parsing, lookup, tracking and presentation-state modules.

WHY: The core package contains the parts of the transcript library with
real invariants — caption parsing, active-cue lookup, position tracking and
the toggle state machine. Everything outside it (formatters, loader, CLI,
session) is wiring on top of these.

HOW: ir.py defines the data structures, parser.py and sanitizer.py build
them from WebVTT text, snippets.py looks up cues by time, tracker.py turns
media position sources into change notifications, state.py and snapshot.py
own the presentation state, and search.py computes highlight spans.

RULES:
- IR dataclasses are the contract — change with care
- No module here performs I/O
- Failures are represented in return values, not exceptions
"""
