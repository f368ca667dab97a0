"""Configuration constants and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Sample rate, log verbosity, and redaction text are
plain data — not buried in logic — so both humans and coding agents can
modify them confidently.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values, each overridable by an environment variable
where that makes sense.

RULES:
- DEFAULT_SAMPLE_RATE is the realtime API's PCM16 output rate (24 kHz)
- LOG_LEVEL is one of LOG_LEVELS; unknown values fall back to "WARNING"
- A REALTIME_LOG_SAMPLE_RATE that is not a positive integer falls back
  to 24000
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

_env_sample_rate = os.getenv("REALTIME_LOG_SAMPLE_RATE", "24000").strip()

DEFAULT_SAMPLE_RATE = (
    int(_env_sample_rate)
    if _env_sample_rate.isdecimal() and int(_env_sample_rate) > 0
    else 24000
)
"""Sample rate (Hz) of response.audio.delta payloads."""

AUDIO_REDACTION_PLACEHOLDER = "[audio data hidden]"
"""Replaces base64 audio in sanitized events."""

# ---------------------------------------------------------------------------
# Parsing and logging
# ---------------------------------------------------------------------------

WARNING_PREVIEW_CHARS = 100
"""Maximum payload characters quoted in a decode warning."""

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
"""Levels accepted by --log-level and REALTIME_LOG_LEVEL."""

LOG_LEVEL = os.getenv("REALTIME_LOG_LEVEL", "WARNING").strip().upper()
if LOG_LEVEL not in LOG_LEVELS:
    LOG_LEVEL = "WARNING"

LOG_FILE_EXTENSIONS: set[str] = {".log", ".txt", ".jsonl", ".ndjson"}
"""Extensions the CLI expects for input logs (lowercase, with dot)."""
