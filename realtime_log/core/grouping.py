"""Response-cycle grouping, phase markers, and delta aggregation.

WHY: A session's raw event list is unreadable — one spoken answer is a
response.created, hundreds of audio and transcript deltas, a few item
and content-part events, and a response.done. Grouping turns that into
phase markers, one ResponseCycle per response, and one DeltaGroup per
run of streaming fragments.

HOW: group_events is a single pass with one open-cycle slot, tracked by
an explicit GroupingState (IDLE or IN_CYCLE) plus a pending buffer.
Marker events drive the transitions; every other event is either
buffered into the open cycle or emitted standalone. When a cycle closes
(or a new one opens, or input ends) its buffer is run-length aggregated
into DeltaGroups and the cycle is emitted.

RULES:
- At most one cycle is open at a time
- speech_started: flush, PhaseMarker(speech), then the event standalone
- response.created: flush, PhaseMarker(response), open a cycle whose
  first item is the response.created event itself
- response.done / response.cancelled: closes the open cycle; with no
  open cycle it is emitted standalone (orphan close)
- response.function_call_arguments.done: folded into an open cycle with
  no marker; outside a cycle it gets PhaseMarker(function_call)
- Token usage comes from response.done's response.usage; missing or
  non-numeric counters default to 0, integral floats (10.0) count as ints
- Every input event appears in the output exactly once
"""

from __future__ import annotations

import enum
from typing import Iterable, List, Optional

from realtime_log.core.events import (
    FUNCTION_CALL_ARGUMENTS_DONE,
    RESPONSE_CANCELLED,
    RESPONSE_CREATED,
    RESPONSE_DONE,
    SPEECH_STARTED,
    TEXT_DELTA_EVENT_TYPES,
    is_delta_event,
)
from realtime_log.core.ir import (
    CycleItem,
    DecodedLine,
    DeltaGroup,
    DeltaGroupStats,
    EventGroup,
    PhaseMarker,
    PhaseType,
    ResponseCycle,
    StandaloneEvent,
    TokenUsage,
    as_dict,
    as_str,
)


class GroupingState(enum.Enum):
    IDLE = "idle"
    IN_CYCLE = "in_cycle"


def _make_group(run: List[DecodedLine]) -> DeltaGroup:
    return DeltaGroup(
        event_type=run[0].event_type,
        events=list(run),
        first_line=run[0].line_number,
        last_line=run[-1].line_number,
    )


def aggregate_delta_events(events: Iterable[DecodedLine]) -> List[CycleItem]:
    """Coalesce consecutive same-type delta events into DeltaGroups.

    HOW: Keep one open run keyed by event type. A delta of the run's type
    extends it; a delta of another type closes it and starts a new run; a
    non-delta event closes it and is emitted as-is.

    RULES:
    - Only DELTA_EVENT_TYPES are ever grouped
    - A group never spans a different event
    - Single deltas still become a one-member DeltaGroup
    """
    result: List[CycleItem] = []
    run: List[DecodedLine] = []

    for line in events:
        event_type = line.event_type
        if is_delta_event(event_type):
            if run and run[0].event_type == event_type:
                run.append(line)
                continue
            if run:
                result.append(_make_group(run))
            run = [line]
        else:
            if run:
                result.append(_make_group(run))
                run = []
            result.append(line)

    if run:
        result.append(_make_group(run))

    return result


def _extract_token_usage(line: DecodedLine) -> Optional[TokenUsage]:
    response = as_dict(line.event.get("response")) or {}
    usage = as_dict(response.get("usage"))
    if usage is None:
        return None
    return TokenUsage(
        input=_as_count(usage.get("input_tokens")),
        output=_as_count(usage.get("output_tokens")),
        total=_as_count(usage.get("total_tokens")),
    )


def _as_count(value: object) -> int:
    # bool is an int subclass; a true/false counter is malformed
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    # JSON encoders sometimes write counters as 10.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _phase(phase: PhaseType, line: DecodedLine) -> PhaseMarker:
    return PhaseMarker(phase=phase, line_number=line.line_number, timestamp=line.timestamp)


def group_events(events: Iterable[DecodedLine]) -> List[EventGroup]:
    """Group one session's events into phases, cycles, and standalone events.

    Args:
        events: The session's decoded lines, in line order.

    Returns:
        EventGroups in order. Each input line appears exactly once, either
        as a StandaloneEvent or inside a ResponseCycle's items.
    """
    result: List[EventGroup] = []

    state = GroupingState.IDLE
    pending: List[DecodedLine] = []
    start_event: Optional[DecodedLine] = None
    response_id: Optional[str] = None

    def _flush(end_event: Optional[DecodedLine] = None,
               token_usage: Optional[TokenUsage] = None) -> None:
        """Emit the open cycle, if any, and return to IDLE."""
        nonlocal state, pending, start_event, response_id
        if state is GroupingState.IN_CYCLE and start_event is not None:
            result.append(ResponseCycle(
                start_event=start_event,
                items=aggregate_delta_events(pending),
                response_id=response_id,
                end_event=end_event,
                token_usage=token_usage,
            ))
        state = GroupingState.IDLE
        pending = []
        start_event = None
        response_id = None

    for line in events:
        event_type = line.event_type

        if event_type == SPEECH_STARTED:
            _flush()
            result.append(_phase(PhaseType.SPEECH, line))
            result.append(StandaloneEvent(event=line))

        elif event_type == RESPONSE_CREATED:
            _flush()
            result.append(_phase(PhaseType.RESPONSE, line))
            response = as_dict(line.event.get("response")) or {}
            state = GroupingState.IN_CYCLE
            start_event = line
            response_id = as_str(response.get("id"))
            pending.append(line)

        elif event_type in (RESPONSE_DONE, RESPONSE_CANCELLED):
            if state is GroupingState.IN_CYCLE:
                pending.append(line)
                usage = _extract_token_usage(line) if event_type == RESPONSE_DONE else None
                _flush(end_event=line, token_usage=usage)
            else:
                result.append(StandaloneEvent(event=line))

        elif event_type == FUNCTION_CALL_ARGUMENTS_DONE:
            if state is GroupingState.IN_CYCLE:
                pending.append(line)
            else:
                result.append(_phase(PhaseType.FUNCTION_CALL, line))
                result.append(StandaloneEvent(event=line))

        elif state is GroupingState.IN_CYCLE:
            pending.append(line)

        else:
            result.append(StandaloneEvent(event=line))

    # Input ended with a response still streaming
    _flush()

    return result


def get_delta_group_stats(group: DeltaGroup) -> DeltaGroupStats:
    """Summarize a DeltaGroup.

    RULES:
    - count is always the number of members
    - For transcript/text delta types, aggregated_text concatenates each
      member's "delta" (or "transcript" when delta is empty or absent)
    - Other delta types (audio, function arguments) get no text
    """
    if group.event_type not in TEXT_DELTA_EVENT_TYPES:
        return DeltaGroupStats(count=group.count)

    parts: List[str] = []
    for line in group.events:
        text = as_str(line.event.get("delta")) or as_str(line.event.get("transcript")) or ""
        parts.append(text)
    return DeltaGroupStats(count=group.count, aggregated_text="".join(parts))
