"""WAV export of each response cycle's streamed audio.

WHY: When a voice response sounds wrong to a user, the log is the only
record of what the model actually sent. Rebuilding each response's audio
as a WAV file lets it be replayed in any audio tool.

HOW: Each session is grouped with group_events; every ResponseCycle's
audio delta runs are decoded with extract_cycle_audio, converted back
to int16 with to_pcm16 (so the WAV holds the exact logged samples), and
written as a mono 16-bit PCM WAV via soundfile into memory.

RULES:
- One WAV per response cycle that has decodable audio; none otherwise
- Suffix: "-<session id>-response-<n>.wav", n counting cycles per
  session from 1 (cycles without audio still advance the count)
- Undecodable fragments are skipped, never fatal; each is recorded once
  in parsed.warnings (so a later JSON export lists it)
- Sample rate defaults to config.DEFAULT_SAMPLE_RATE and must be positive
"""

from __future__ import annotations

import io
import logging
from typing import List, Optional

import soundfile as sf

from realtime_log.audio.codec import (
    extract_cycle_audio,
    format_duration,
    get_audio_duration,
    to_pcm16,
)
from realtime_log.config import DEFAULT_SAMPLE_RATE
from realtime_log.core.grouping import group_events
from realtime_log.core.ir import ParsedLog, ResponseCycle
from realtime_log.formatters.base import BaseFormatter, FormatterOutput

logger = logging.getLogger(__name__)


class ResponseAudioFormatter(BaseFormatter):
    """Formatter producing one WAV file per response cycle."""

    def __init__(self, sample_rate: Optional[int] = None) -> None:
        if sample_rate is None:
            sample_rate = DEFAULT_SAMPLE_RATE
        if sample_rate <= 0:
            raise ValueError("sample_rate must be positive, got {}".format(sample_rate))
        self.sample_rate = sample_rate

    @property
    def name(self) -> str:
        return "Response Audio (WAV)"

    def format(self, parsed: ParsedLog) -> List[FormatterOutput]:
        outputs: List[FormatterOutput] = []

        for session in parsed.sessions:
            cycles = [g for g in group_events(session.events) if isinstance(g, ResponseCycle)]
            for index, cycle in enumerate(cycles, start=1):
                audio = extract_cycle_audio(cycle, parsed.warnings)
                if audio is None:
                    continue

                buf = io.BytesIO()
                sf.write(buf, to_pcm16(audio), self.sample_rate, format="WAV", subtype="PCM_16")
                logger.info(
                    "%s response %d: %s of audio",
                    session.id,
                    index,
                    format_duration(get_audio_duration(audio, self.sample_rate)),
                )

                outputs.append(FormatterOutput(
                    suffix="-{}-response-{}.wav".format(session.id, index),
                    content=buf.getvalue(),
                    media_type="audio/wav",
                ))

        return outputs
