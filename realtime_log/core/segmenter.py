"""Session segmentation and whole-file parsing.

WHY: One log file often spans several realtime connections. Each
connection starts with a session.created event carrying the model and
voice; everything until the next session.created belongs to it.

HOW: Lines are decoded one by one (undecodable lines are logged and
skipped). segment_sessions walks the decoded lines keeping a "current
session" reference: session.created opens a new session, any other line
joins the current one. Lines seen before the first session.created go to
an implicit session so that no decoded line is ever lost.

RULES:
- Session ids are "session-<n>", counting explicit and implicit sessions
- start_time is the timestamp of the session's first line
- model / voice / remote_session_id come from the nested "session"
  object of session.created, only when they are strings
- session_tag is the first bracketed session tag seen in the session
- Every decoded line belongs to exactly one session, in line order
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, List, Optional

from realtime_log.core.decoder import decode_line
from realtime_log.core.events import SESSION_CREATED
from realtime_log.core.ir import DecodedLine, ParsedLog, ParseWarning, Session, as_dict, as_str
from realtime_log.errors import LineDecodeError

logger = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def iter_decoded_lines(
    lines: Iterable[str],
    warnings: Optional[List[ParseWarning]] = None,
) -> Iterator[DecodedLine]:
    """Decode raw lines, skipping blanks and undecodable lines.

    Args:
        lines: Raw text lines in file order. Numbering starts at 1.
        warnings: Optional list that receives one ParseWarning per
            rejected line.

    Yields:
        DecodedLine objects in line order.
    """
    for line_number, line in enumerate(lines, start=1):
        try:
            decoded = decode_line(line, line_number)
        except LineDecodeError as e:
            logger.warning("Skipping line %d: %s: %s", e.line_number, e.reason, e.preview)
            if warnings is not None:
                warnings.append(ParseWarning(
                    kind="line",
                    line_number=e.line_number,
                    message=e.reason,
                    preview=e.preview,
                ))
            continue
        if decoded is not None:
            yield decoded


def _open_session(line: DecodedLine, counter: int) -> Session:
    session_data = as_dict(line.event.get("session")) or {}
    return Session(
        id="session-{}".format(counter),
        events=[line],
        session_tag=line.session_tag,
        remote_session_id=as_str(session_data.get("id")),
        start_time=line.timestamp,
        model=as_str(session_data.get("model")),
        voice=as_str(session_data.get("voice")),
    )


def segment_sessions(decoded_lines: Iterable[DecodedLine]) -> List[Session]:
    """Partition decoded lines into sessions delimited by session.created.

    Args:
        decoded_lines: Decoded lines in line order.

    Returns:
        Sessions in order of their first line.
    """
    sessions: List[Session] = []
    current: Optional[Session] = None
    counter = 0

    for line in decoded_lines:
        if line.event_type == SESSION_CREATED:
            counter += 1
            current = _open_session(line, counter)
            sessions.append(current)
        elif current is not None:
            current.events.append(line)
            if current.session_tag is None:
                current.session_tag = line.session_tag
        else:
            # Orphan lines before the first session.created
            counter += 1
            current = Session(
                id="session-{}".format(counter),
                events=[line],
                session_tag=line.session_tag,
                start_time=line.timestamp,
                implicit=True,
            )
            sessions.append(current)

    return sessions


def parse_log_file(content: str) -> ParsedLog:
    """Parse the full text of a log file into sessions.

    Args:
        content: The whole log, with LF or CRLF line endings.

    Returns:
        ParsedLog holding the sessions and one warning per rejected line.
    """
    warnings: List[ParseWarning] = []
    lines = _LINE_SPLIT_RE.split(content)
    sessions = segment_sessions(iter_decoded_lines(lines, warnings))
    logger.debug("Parsed %d sessions from %d lines", len(sessions), len(lines))
    return ParsedLog(sessions=sessions, warnings=warnings)
