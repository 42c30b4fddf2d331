"""Command-line interface for transcript-sync.

WHY: Caption files need checking and converting outside any player: does
this WebVTT file parse, what does the plaintext view look like, which cue
is active at 1:23, where does a word occur? The CLI runs the same session
a host would embed, without a media source, and prints the result.

HOW: Uses argparse for the source (path or http(s) URL), the view toggles
and the queries. The caption text is fetched via asyncio.run(), loaded
into a TranscriptSession, and the selected formatter renders the cues.
Rendered output goes to stdout (or to {stem}{suffix} files with
--output-dir); status, parse errors and query results go to stderr.

RULES:
- Positional argument: caption file path or http(s) URL
- --state restores a persisted state file before the toggle flags apply
- --format defaults to the current view: snippets when interactive,
  plain_text otherwise
- Exit codes: 0 ok, 1 no usable cue, 2 caption or state file unreadable
- Status output goes to stderr (not stdout)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from transcript_sync import config
from transcript_sync.core.timecode import clock_label
from transcript_sync.formatters import FORMATTERS
from transcript_sync.formatters.base import BaseFormatter, FormatterOutput
from transcript_sync.loader import TranscriptLoadError, fetch_caption_text, is_url
from transcript_sync.session import TranscriptSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_CONTENT = 1
EXIT_LOAD_FAILED = 2


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _source_stem(source: str) -> str:
    """Output file stem for a caption path or URL."""
    path = urlparse(source).path if is_url(source) else source
    return Path(path).stem or "transcript"


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. lecture-transcript.txt)
    - Conflict: counter inserted before the extension, starting at 2
      (e.g. lecture-transcript-2.txt)
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _build_formatter(key: str, session: TranscriptSession) -> BaseFormatter:
    """Instantiate a formatter configured from the session's state."""
    machine = session.state_machine
    if key == "plain_text":
        return FORMATTERS[key](linebreaks=machine.state.linebreaks)
    if key == "snippets":
        return FORMATTERS[key](
            timestamps=machine.state.timestamp and machine.is_enabled("timestamp"),
        )
    return FORMATTERS[key]()


def _apply_flags(session: TranscriptSession, args: argparse.Namespace) -> None:
    machine = session.state_machine
    if args.plaintext:
        machine.set_interactive(False)
    if args.linebreaks:
        machine.set_linebreaks(True)
    if args.timestamps and not machine.set_timestamp(True):
        _status("Note: --timestamps has no effect in the plaintext view.")


def _report_active(session: TranscriptSession, time: float) -> None:
    label = clock_label(time) if math.isfinite(time) else str(time)
    session.handle_time(time)
    cue_id = session.active_cue_id
    if cue_id is None:
        _status("No active cue at {}.".format(label))
        return
    cue = session.index.find_by_id(cue_id)
    _status("Active cue at {}: #{} {}".format(label, cue_id, cue.plain_text))


def _report_search(session: TranscriptSession, query: str) -> None:
    matches = session.search(query)
    _status("{} match(es) for {!r}".format(len(matches), query))
    for match in matches:
        cue = session.index.find_by_id(match.cue_id)
        _status("  #{} [{}] {}".format(
            match.cue_id,
            clock_label(cue.start_time),
            cue.display_text[match.start_offset:match.end_offset],
        ))


def _write_outputs(
    outputs: List[FormatterOutput],
    stem: str,
    output_dir: Optional[Path],
) -> None:
    for output in outputs:
        if output_dir is None:
            sys.stdout.write(output.content)
            continue
        path = _resolve_output_path(stem, output.suffix, output_dir)
        path.write_text(output.content, encoding="utf-8")
        _status("Saved: {}".format(path))


def _run(args: argparse.Namespace) -> int:
    output_dir: Optional[Path] = None
    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        if not output_dir.is_dir():
            _status("Error: Output directory does not exist: {}".format(output_dir))
            return EXIT_LOAD_FAILED

    previous_state = None
    if args.state:
        try:
            previous_state = Path(args.state).read_text(encoding="utf-8")
        except OSError as exc:
            _status("Error: Could not read state file {}: {}".format(args.state, exc))
            return EXIT_LOAD_FAILED

    try:
        text = asyncio.run(fetch_caption_text(args.source))
    except TranscriptLoadError as exc:
        _status("Error: {}".format(exc))
        _status(config.NO_TRANSCRIPT_MESSAGE)
        return EXIT_LOAD_FAILED

    session = TranscriptSession(previous_state=previous_state)
    _apply_flags(session, args)
    result = session.load(text)

    for error in result.errors:
        _status("  {}".format(error))
    if not session.has_content:
        _status(session.status_message)
        return EXIT_NO_CONTENT
    _status("Loaded {} cue(s).".format(len(result.cues)))

    if args.at is not None:
        _report_active(session, args.at)
    if args.search:
        _report_search(session, args.search)

    if args.state:
        _status("State: {}".format(json.dumps(session.get_current_state(), sort_keys=True)))

    if not session.state.visible:
        _status("Transcript is hidden; nothing to render.")
        return EXIT_OK

    key = args.format
    if key is None:
        key = "snippets" if session.state.interactive else "plain_text"
    formatter = _build_formatter(key, session)
    logger.debug("Rendering with %s formatter", formatter.name)
    _write_outputs(formatter.format(session.cues), _source_stem(args.source), output_dir)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Positional: source (required)
    - Optional: --format, --linebreaks, --timestamps, --plaintext, --state
    - Optional: --at, --search, --output-dir, -v/--verbose
    """
    parser = argparse.ArgumentParser(
        prog="transcript-sync",
        description="Parse a WebVTT transcript and render its plaintext, "
                    "interactive or caption view.",
    )

    parser.add_argument(
        "source",
        help="Path or http(s) URL of the WebVTT caption file.",
    )

    parser.add_argument(
        "--format",
        choices=sorted(FORMATTERS.keys()),
        default=None,
        help="Output format (default: snippets, or plain_text with --plaintext).",
    )

    parser.add_argument(
        "--linebreaks",
        action="store_true",
        help="One cue per line in the plaintext view.",
    )

    parser.add_argument(
        "--timestamps",
        action="store_true",
        help="Decorate interactive snippets with their start time.",
    )

    parser.add_argument(
        "--plaintext",
        action="store_true",
        help="Switch to the plaintext view.",
    )

    parser.add_argument(
        "--state",
        default=None,
        help="JSON file with a persisted presentation state to resume.",
    )

    parser.add_argument(
        "--at",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Report the cue active at this media position.",
    )

    parser.add_argument(
        "--search",
        default=None,
        metavar="QUERY",
        help="Report every occurrence of QUERY (case-insensitive).",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Save output as {stem}{suffix} in this directory instead of stdout.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Returns the process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    return _run(args)


if __name__ == "__main__":
    sys.exit(main())
