"""Exception hierarchy for recoverable parse failures.

WHY: Logs may be truncated, hand-edited, or partially corrupted. Both
kinds of failure here are per-item: the caller drops the offending line
or audio fragment, records a warning, and continues.

RULES:
- Both errors subclass ValueError so generic callers can catch them
- Neither is ever fatal to a whole parse
"""

from __future__ import annotations


class RealtimeLogError(Exception):
    """Base class for all realtime_log errors."""


class LineDecodeError(RealtimeLogError, ValueError):
    """A log line whose payload is not a JSON event object.

    Attributes:
        line_number: 1-based line number of the rejected line.
        preview: The payload text, truncated for display in warnings.
    """

    def __init__(self, line_number: int, preview: str, reason: str) -> None:
        self.line_number = line_number
        self.preview = preview
        self.reason = reason
        super().__init__("Line {}: {} ({!r})".format(line_number, reason, preview))


class AudioDecodeError(RealtimeLogError, ValueError):
    """A base64 PCM16 fragment that cannot be decoded."""
