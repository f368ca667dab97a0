"""Single-line decoding of realtime API log lines.

WHY: Log writers prefix each JSON event with optional metadata — an ISO
timestamp, a bracketed session tag, a bracketed source tag — in a fixed
order but in any combination. Everything downstream needs those fields
separated from the event payload.

HOW: Three anchored regexes are tried in order against the stripped line.
Each one that matches consumes its token and any following whitespace;
one that does not match leaves the text untouched. Whatever remains must
be a JSON object with a string "type".

RULES:
- Blank or whitespace-only lines return None silently
- Prefix order is fixed: timestamp, session tag, source tag
- Source tags are case-insensitive and normalized to uppercase
- Anything that is not a JSON object with a string "type" raises
  LineDecodeError; the caller decides whether to skip or stop
- raw_text keeps the original line, unstripped
"""

from __future__ import annotations

import json
import re
from typing import Optional

from realtime_log.config import WARNING_PREVIEW_CHARS
from realtime_log.core.ir import DecodedLine, LogSource
from realtime_log.errors import LineDecodeError

# ISO-8601-like timestamp: 2024-01-15T10:30:00.000Z
_TIMESTAMP_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}T[\d:.]+Z?)\s*")

# Bracketed session tag: [3f2a9c1e-...]
_SESSION_TAG_RE = re.compile(r"^\[([a-f0-9-]+)\]\s*", re.IGNORECASE)

# Bracketed source tag: [OPENAI] or [USER]
_SOURCE_RE = re.compile(r"^\[(OPENAI|USER)\]\s*", re.IGNORECASE)


def _preview(text: str) -> str:
    return text[:WARNING_PREVIEW_CHARS]


def decode_line(line: str, line_number: int) -> Optional[DecodedLine]:
    """Decode one raw log line into a DecodedLine.

    Args:
        line: The raw text line, without its line terminator.
        line_number: 1-based position of the line in its input.

    Returns:
        A DecodedLine, or None when the line is blank.

    Raises:
        LineDecodeError: If the payload is not a JSON object carrying a
            string "type".
    """
    remaining = line.strip()
    if not remaining:
        return None

    timestamp: Optional[str] = None
    session_tag: Optional[str] = None
    source: Optional[LogSource] = None

    match = _TIMESTAMP_RE.match(remaining)
    if match:
        timestamp = match.group(1)
        remaining = remaining[match.end():]

    match = _SESSION_TAG_RE.match(remaining)
    if match:
        session_tag = match.group(1)
        remaining = remaining[match.end():]

    match = _SOURCE_RE.match(remaining)
    if match:
        source = LogSource(match.group(1).upper())
        remaining = remaining[match.end():]

    try:
        event = json.loads(remaining)
    except json.JSONDecodeError as e:
        raise LineDecodeError(line_number, _preview(remaining), "invalid JSON: {}".format(e.msg)) from e

    if not isinstance(event, dict):
        raise LineDecodeError(line_number, _preview(remaining), "payload is not a JSON object")
    if not isinstance(event.get("type"), str):
        raise LineDecodeError(line_number, _preview(remaining), "event has no string 'type'")

    return DecodedLine(
        event=event,
        raw_text=line,
        line_number=line_number,
        timestamp=timestamp,
        session_tag=session_tag,
        source=source,
    )
