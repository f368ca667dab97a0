"""Intermediate representation dataclasses for parsed realtime logs.

WHY: A realtime API log is a flat stream of text lines. Exporters and
callers need sessions, response cycles, delta runs, and phase boundaries —
but they should never re-parse text to get them. The IR provides one
well-typed form that every downstream consumer works with.

HOW: Dataclasses form a hierarchy:
  DecodedLine    — one log line: prefix tokens plus the JSON event
  Session        — the lines between two session.created events
  PhaseMarker    — synthetic boundary between conversational phases
  DeltaGroup     — a contiguous run of same-type streaming deltas
  ResponseCycle  — response.created through response.done/cancelled
  StandaloneEvent — an event outside any response cycle
  ParsedLog      — sessions plus the non-fatal warnings of one parse

RULES:
- Events stay plain dicts; unknown fields are preserved verbatim
- line_number is 1-based and is the stable identity of a line
- Entities are built once during a parse and never mutated afterwards
- EventGroup is only produced by the grouping engine, per session
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

Event = Dict[str, Any]
"""An open JSON object with a mandatory string ``type``."""


class LogSource(enum.Enum):
    """Bracketed source tag of a log line."""

    OPENAI = "OPENAI"
    USER = "USER"


class PhaseType(enum.Enum):
    """Conversational phase announced by a PhaseMarker."""

    SPEECH = "speech"
    RESPONSE = "response"
    FUNCTION_CALL = "function_call"


@dataclass(frozen=True)
class DecodedLine:
    """One successfully decoded log line.

    RULES:
    - timestamp / session_tag / source are None when the prefix was absent
    - event is the parsed JSON payload, untouched
    - raw_text is the original line, including surrounding whitespace
    """

    event: Event
    raw_text: str
    line_number: int
    timestamp: str | None = None
    session_tag: str | None = None
    source: LogSource | None = None

    @property
    def event_type(self) -> str:
        return self.event["type"]


@dataclass
class Session:
    """A contiguous run of lines opened by session.created.

    WHY: One log file often holds several connections back to back.
    Sessions are delimited only by the next session.created; they never
    close explicitly.

    RULES:
    - id is synthetic ("session-1", "session-2", ...) and unique per parse
    - remote_session_id is the payload's session.id, when present
    - implicit is True for the session holding lines seen before the first
      session.created
    - events are in line-number order and owned by this session only
    """

    id: str
    events: List[DecodedLine] = field(default_factory=list)
    session_tag: str | None = None
    remote_session_id: str | None = None
    start_time: str | None = None
    model: str | None = None
    voice: str | None = None
    implicit: bool = False


@dataclass(frozen=True)
class PhaseMarker:
    phase: PhaseType
    line_number: int
    timestamp: str | None = None


@dataclass(frozen=True)
class DeltaGroup:
    """A run of consecutive streaming deltas of one event type.

    RULES:
    - events is non-empty and every member has event_type
    - members are contiguous in the original order
    - first_line / last_line are the bounding line numbers
    """

    event_type: str
    events: List[DecodedLine]
    first_line: int
    last_line: int

    @property
    def count(self) -> int:
        return len(self.events)


@dataclass(frozen=True)
class TokenUsage:
    input: int = 0
    output: int = 0
    total: int = 0


CycleItem = Union[DecodedLine, DeltaGroup]


@dataclass(frozen=True)
class ResponseCycle:
    """Everything from response.created to its terminating marker.

    WHY: A single model response streams dozens to thousands of events.
    Grouping them into one cycle, with deltas coalesced, is what makes a
    session readable.

    RULES:
    - start_event is always the response.created line
    - end_event is response.done or response.cancelled, or None when the
      log ended (or a new cycle began) before the response finished
    - items starts with start_event and ends with end_event when present
    - items never holds two adjacent unmerged deltas of the same type
    - token_usage is only set from a response.done carrying usage
    """

    start_event: DecodedLine
    items: List[CycleItem]
    response_id: str | None = None
    end_event: DecodedLine | None = None
    token_usage: TokenUsage | None = None

    @property
    def is_complete(self) -> bool:
        return self.end_event is not None

    @property
    def is_cancelled(self) -> bool:
        return self.end_event is not None and self.end_event.event_type == "response.cancelled"

    @property
    def delta_groups(self) -> List[DeltaGroup]:
        return [item for item in self.items if isinstance(item, DeltaGroup)]

    @property
    def audio_delta_groups(self) -> List[DeltaGroup]:
        return [g for g in self.delta_groups if g.event_type == "response.audio.delta"]

    @property
    def total_events(self) -> int:
        """Number of log lines in the cycle, counting delta group members."""
        return sum(
            item.count if isinstance(item, DeltaGroup) else 1
            for item in self.items
        )


@dataclass(frozen=True)
class StandaloneEvent:
    event: DecodedLine


EventGroup = Union[PhaseMarker, ResponseCycle, StandaloneEvent]


@dataclass(frozen=True)
class DeltaGroupStats:
    """Summary of a DeltaGroup.

    aggregated_text is only set for text-bearing delta types and holds the
    full streamed text reconstructed from the fragments.
    """

    count: int
    aggregated_text: Optional[str] = None


@dataclass(frozen=True)
class ParseWarning:
    """A recoverable problem met while parsing.

    RULES:
    - kind is "line" (undecodable line) or "audio" (undecodable fragment)
    - preview is the offending content, truncated
    """

    kind: str
    line_number: int
    message: str
    preview: str = ""


@dataclass
class ParsedLog:
    """Result of parsing one whole log file."""

    sessions: List[Session]
    warnings: List[ParseWarning] = field(default_factory=list)

    def get_session(self, session_id: str) -> Optional[Session]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None


def as_dict(value: Any) -> Dict[str, Any] | None:
    """Return value if it is a JSON object, else None.

    Nested payload fields are untrusted; callers use this to degrade
    malformed structures to "unset" instead of failing.
    """
    return value if isinstance(value, dict) else None


def as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None
