"""Command-line interface for the realtime log inspector.

WHY: Users need a simple way to turn a realtime API log into something
they can read, diff, or listen to. The CLI wires together the full
pipeline — file reading, line decoding, session segmentation, grouping,
pluggable export, and file saving — behind a single command.

HOW: Uses argparse to accept an input log file, export format selection,
output directory, and audio sample rate. Parses the log, prints a
per-session summary, runs the selected exporters, and saves their output
next to the source (or to --output-dir). Status messages go to stderr.

RULES:
- Positional argument: input log file path
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-events-2.json)
- Status output goes to stderr (not stdout)
- Undecodable lines and audio fragments are reported, never fatal
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from realtime_log.audio.codec import extract_cycle_audio, format_duration, get_audio_duration
from realtime_log.config import DEFAULT_SAMPLE_RATE, LOG_FILE_EXTENSIONS, LOG_LEVEL, LOG_LEVELS
from realtime_log.core.grouping import group_events
from realtime_log.core.ir import ParsedLog, ParseWarning, ResponseCycle, Session
from realtime_log.core.segmenter import parse_log_file
from realtime_log.formatters import FORMATTERS
from realtime_log.formatters.base import FormatterOutput
from realtime_log.formatters.response_audio import ResponseAudioFormatter


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _split_suffix(suffix: str) -> Tuple[str, str]:
    """Split "-events.json" into ("-events", ".json"); no extension → ("-x", "")."""
    name, dot, ext = suffix.rpartition(".")
    if not dot or not name:
        return suffix, ""
    return name, dot + ext


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Pick a free file name for one export.

    WHY: Inspecting the same log twice (say, before and after changing
    --sample-rate) must keep both sets of WAVs and JSON side by side.

    RULES:
    - {stem}{suffix} when free (call-session-1-response-1.wav)
    - Otherwise a counter from 2 goes before the extension
      (call-session-1-response-1-2.wav, then -3, ...)
    """
    name, ext = _split_suffix(suffix)
    candidate = output_dir / "{}{}".format(stem, suffix)
    counter = 2
    while candidate.exists():
        candidate = output_dir / "{}{}-{}{}".format(stem, name, counter, ext)
        counter += 1
    return candidate


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Write one export next to the log (or in --output-dir).

    WAV exports arrive as bytes and are written untouched; text exports
    are written as UTF-8 so transcripts keep non-ASCII speech intact.
    """
    path = _resolve_output_path(stem, output.suffix, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def _summarize_session(session: Session, sample_rate: int, warnings: List[ParseWarning]) -> str:
    """One status line describing a session.

    Undecodable audio fragments met while measuring are added to warnings.
    """
    cycles = [g for g in group_events(session.events) if isinstance(g, ResponseCycle)]

    audio_seconds = 0.0
    for cycle in cycles:
        audio = extract_cycle_audio(cycle, warnings)
        if audio is not None:
            audio_seconds += get_audio_duration(audio, sample_rate)

    parts = ["  {}".format(session.id)]
    if session.implicit:
        parts.append("(implicit)")
    if session.model:
        parts.append("model={}".format(session.model))
    if session.voice:
        parts.append("voice={}".format(session.voice))
    parts.append("{} events".format(len(session.events)))
    parts.append("{} responses".format(len(cycles)))
    if audio_seconds:
        parts.append("audio {}".format(format_duration(audio_seconds)))
    return " ".join(parts)


def _report(parsed: ParsedLog, sample_rate: int) -> None:
    _status("Found {} session(s)".format(len(parsed.sessions)))
    for session in parsed.sessions:
        _status(_summarize_session(session, sample_rate, parsed.warnings))

    line_warnings = [w for w in parsed.warnings if w.kind == "line"]
    audio_warnings = [w for w in parsed.warnings if w.kind == "audio"]
    if line_warnings:
        _status("Skipped {} undecodable line(s)".format(len(line_warnings)))
    if audio_warnings:
        _status("Skipped {} undecodable audio fragment(s)".format(len(audio_warnings)))
    for warning in parsed.warnings[:10]:
        _status("  line {}: {}".format(warning.line_number, warning.message))


def run(args: argparse.Namespace) -> int:
    """Execute the full inspection pipeline and return an exit code.

    RULES:
    - Validate input and output paths before parsing
    - Unknown format keys fail before any work is done
    - Each formatter's output files are saved with conflict avoidance
    """
    input_path = Path(args.input_file).resolve()

    if not input_path.is_file():
        print("Error: File not found: {}".format(input_path), file=sys.stderr)
        return 1

    if input_path.suffix.lower() not in LOG_FILE_EXTENSIONS:
        _status("Warning: unexpected file extension '{}', parsing anyway".format(input_path.suffix))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        print("Error: Output directory does not exist: {}".format(output_dir), file=sys.stderr)
        return 1

    if args.formats:
        format_keys = [f.strip() for f in args.formats.split(",") if f.strip()]
        for key in format_keys:
            if key not in FORMATTERS:
                available = ", ".join(sorted(FORMATTERS.keys()))
                print(
                    "Error: Unknown format '{}'. Available formats: {}".format(key, available),
                    file=sys.stderr,
                )
                return 1
    else:
        format_keys = list(FORMATTERS.keys())

    try:
        content = input_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print("Error: Cannot read {}: {}".format(input_path, e), file=sys.stderr)
        return 1

    _status("Parsing {}...".format(input_path.name))
    parsed = parse_log_file(content)
    _report(parsed, args.sample_rate)

    _status("Exporting...")
    stem = input_path.stem
    saved_files: List[Path] = []
    try:
        for key in format_keys:
            if key == "response_audio":
                formatter = ResponseAudioFormatter(sample_rate=args.sample_rate)
            else:
                formatter = FORMATTERS[key]()
            _status("  Running {} formatter...".format(formatter.name))
            for output in formatter.format(parsed):
                saved_path = _save_output(output, stem, output_dir)
                saved_files.append(saved_path)
                _status("  Saved: {}".format(saved_path.name))
    except OSError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    return 0


def _positive_int(value: str) -> int:
    """argparse type for counts and rates that must be above zero."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("expected an integer, got '{}'".format(value))
    if number <= 0:
        raise argparse.ArgumentTypeError("must be positive, got {}".format(number))
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="realtime_log",
        description="Reconstruct sessions, response cycles, and audio from a "
                    "realtime API event log.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the log file (one JSON event per line).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--sample-rate",
        type=_positive_int,
        default=DEFAULT_SAMPLE_RATE,
        help="Sample rate of response audio in Hz (default: %(default)s).",
    )

    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging verbosity (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
