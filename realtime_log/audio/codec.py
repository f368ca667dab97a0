"""Base64 PCM16 decoding, chunk concatenation, and duration helpers.

WHY: response.audio.delta events carry the model's speech as base64
16-bit little-endian PCM. To measure, export, or play a response, the
fragments of a delta run must be decoded and joined in order.

HOW: Each fragment is strictly base64-decoded and reinterpreted as
little-endian int16 with numpy, then scaled to float32 in [-1.0, 1.0)
by dividing by 32768. Runs are decoded fragment by fragment; failures
are logged and skipped so the rest of the run still plays.

RULES:
- decode_audio_delta raises AudioDecodeError on invalid base64 or an
  odd byte count
- combine_audio_chunks([]) is an empty array; a single chunk is
  returned unchanged
- Extraction returns None ("no audio") when no fragment decoded
- Sample rate defaults to 24 kHz, the realtime API's output rate
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from realtime_log.config import DEFAULT_SAMPLE_RATE
from realtime_log.core.ir import DecodedLine, ParseWarning, ResponseCycle
from realtime_log.errors import AudioDecodeError

logger = logging.getLogger(__name__)

# int16 full scale
_PCM16_SCALE = 32768.0


def decode_audio_delta(data: str) -> np.ndarray:
    """Decode one base64 PCM16 fragment to float32 samples.

    Args:
        data: Base64 text of little-endian signed 16-bit samples.

    Returns:
        1-D float32 array of samples scaled to [-1.0, 1.0).

    Raises:
        AudioDecodeError: If data is not valid base64 or does not hold a
            whole number of 16-bit samples.
    """
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AudioDecodeError("Invalid base64 audio data: {}".format(e)) from e

    if len(raw) % 2 != 0:
        raise AudioDecodeError(
            "PCM16 data must be an even number of bytes, got {}".format(len(raw))
        )

    samples = np.frombuffer(raw, dtype="<i2")
    return samples.astype(np.float32) / np.float32(_PCM16_SCALE)


def to_pcm16(audio: np.ndarray) -> np.ndarray:
    """Convert float samples back to int16, the inverse of decoding.

    Samples outside [-1.0, 1.0) are clipped to the int16 range.
    """
    scaled = np.round(audio.astype(np.float64) * _PCM16_SCALE)
    return np.clip(scaled, -32768, 32767).astype(np.int16)


def combine_audio_chunks(chunks: Sequence[np.ndarray]) -> np.ndarray:
    """Concatenate decoded chunks in order."""
    if len(chunks) == 0:
        return np.zeros(0, dtype=np.float32)
    if len(chunks) == 1:
        return chunks[0]
    return np.concatenate(chunks)


def get_audio_duration(audio: np.ndarray, sample_rate: int = DEFAULT_SAMPLE_RATE) -> float:
    """Duration of a mono sample buffer in seconds.

    Raises:
        ValueError: If sample_rate is not positive.
    """
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive, got {}".format(sample_rate))
    return len(audio) / sample_rate


def format_duration(seconds: float) -> str:
    """Format a duration as "4.2s" below one minute, else "m:ss"."""
    if seconds < 60:
        return "{:.1f}s".format(seconds)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return "{}:{:02d}".format(minutes, secs)


def extract_audio_from_delta_group(
    events: Iterable[DecodedLine],
    warnings: Optional[List[ParseWarning]] = None,
) -> Optional[np.ndarray]:
    """Decode and join the audio fragments of a delta run.

    WHY: A DeltaGroup of response.audio.delta events is one continuous
    stretch of speech split into fragments.

    HOW: Every member with a non-empty string "delta" is decoded. A
    fragment that fails to decode is recorded in warnings, logged, and
    skipped. A fragment whose warning is already in the list is skipped
    silently, so decoding the same cycle twice reports each bad line once.
    Empty decodes are dropped.

    Args:
        events: Audio delta lines, in line order.
        warnings: Optional list receiving one ParseWarning per bad fragment
            line, never duplicated.

    Returns:
        The combined float32 samples, or None if nothing decoded.
    """
    chunks: List[np.ndarray] = []

    for line in events:
        delta = line.event.get("delta")
        if not isinstance(delta, str) or not delta:
            continue
        try:
            decoded = decode_audio_delta(delta)
        except AudioDecodeError as e:
            warning = ParseWarning(
                kind="audio",
                line_number=line.line_number,
                message=str(e),
                preview=delta[:40],
            )
            if warnings is not None:
                # Already reported by an earlier decode of the same cycle
                if warning in warnings:
                    continue
                warnings.append(warning)
            logger.warning("Skipping audio fragment at line %d: %s", line.line_number, e)
            continue
        if len(decoded) > 0:
            chunks.append(decoded)

    if not chunks:
        return None

    return combine_audio_chunks(chunks)


def extract_cycle_audio(
    cycle: ResponseCycle,
    warnings: Optional[List[ParseWarning]] = None,
) -> Optional[np.ndarray]:
    """Decode all audio of a response cycle into one buffer.

    A cycle can hold several audio runs when other events interleave with
    the audio stream; their members are joined in line order.
    """
    lines: List[DecodedLine] = []
    for group in cycle.audio_delta_groups:
        lines.extend(group.events)
    return extract_audio_from_delta_group(lines, warnings)
