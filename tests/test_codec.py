"""Unit tests for the PCM16 audio codec.

WHY: Audio reconstruction is byte-level work — an endianness slip or a
wrong scale factor turns speech into noise, and one corrupt fragment must
not silence a whole response.

HOW: Known int16 samples are encoded with struct and decoded back; chunk
concatenation, durations, and per-fragment failure handling are checked
directly. Floating-point comparisons use pytest.approx.
"""

import logging

import numpy as np
import pytest

from realtime_log.audio.codec import (
    combine_audio_chunks,
    decode_audio_delta,
    extract_audio_from_delta_group,
    extract_cycle_audio,
    format_duration,
    get_audio_duration,
    to_pcm16,
)
from realtime_log.core.grouping import group_events
from realtime_log.core.ir import ResponseCycle
from realtime_log.errors import AudioDecodeError


class TestDecode:
    """decode_audio_delta: base64 PCM16 little-endian → float32."""

    def test_half_scale_samples(self, pcm16_b64):
        samples = decode_audio_delta(pcm16_b64([16384, -16384]))
        assert samples.dtype == np.float32
        assert samples.tolist() == pytest.approx([0.5, -0.5])

    def test_full_scale(self, pcm16_b64):
        samples = decode_audio_delta(pcm16_b64([-32768, 32767, 0]))
        assert samples[0] == -1.0
        assert samples[1] == pytest.approx(32767 / 32768)
        assert samples[2] == 0.0

    def test_little_endian(self):
        # bytes 0x01 0x00 → int16 1, not 256
        samples = decode_audio_delta("AQA=")
        assert samples.tolist() == pytest.approx([1 / 32768])

    def test_empty_payload(self):
        assert len(decode_audio_delta("")) == 0

    def test_invalid_base64_raises(self):
        with pytest.raises(AudioDecodeError):
            decode_audio_delta("not*base64!")

    def test_odd_byte_count_raises(self):
        # "AQID" decodes to 3 bytes
        with pytest.raises(AudioDecodeError):
            decode_audio_delta("AQID")


class TestCombine:
    """combine_audio_chunks concatenates in input order."""

    def test_empty(self):
        combined = combine_audio_chunks([])
        assert len(combined) == 0
        assert combined.dtype == np.float32

    def test_single_chunk_is_identity(self):
        chunk = np.array([0.1, 0.2], dtype=np.float32)
        assert combine_audio_chunks([chunk]) is chunk

    def test_order_preserved(self):
        a = np.array([0.1, 0.2], dtype=np.float32)
        b = np.array([0.3, 0.4, 0.5], dtype=np.float32)
        combined = combine_audio_chunks([a, b])
        assert len(combined) == len(a) + len(b)
        assert combined.tolist() == pytest.approx([0.1, 0.2, 0.3, 0.4, 0.5])


class TestDuration:
    def test_default_sample_rate(self):
        assert get_audio_duration(np.zeros(24000, dtype=np.float32)) == pytest.approx(1.0)

    def test_custom_sample_rate(self):
        assert get_audio_duration(np.zeros(8000, dtype=np.float32), 16000) == pytest.approx(0.5)

    @pytest.mark.parametrize("rate", [0, -24000])
    def test_non_positive_sample_rate_rejected(self, rate):
        with pytest.raises(ValueError):
            get_audio_duration(np.zeros(10, dtype=np.float32), rate)

    @pytest.mark.parametrize("seconds,expected", [
        (0.0, "0.0s"),
        (4.25, "4.2s"),
        (59.9, "59.9s"),
        (60.0, "1:00"),
        (125.7, "2:05"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestExtract:
    """Delta runs decode fragment by fragment; bad fragments are skipped."""

    def test_combines_valid_fragments(self, make_line, pcm16_b64):
        events = [
            make_line("response.audio.delta", delta=pcm16_b64([16384])),
            make_line("response.audio.delta", delta=pcm16_b64([-16384, 0])),
        ]
        audio = extract_audio_from_delta_group(events)
        assert audio.tolist() == pytest.approx([0.5, -0.5, 0.0])

    def test_bad_fragment_skipped_with_warning(self, make_line, pcm16_b64, caplog):
        events = [
            make_line("response.audio.delta", delta=pcm16_b64([16384])),
            make_line("response.audio.delta", delta="@@@"),
            make_line("response.audio.delta", delta=pcm16_b64([-16384])),
        ]
        warnings = []
        with caplog.at_level(logging.WARNING, logger="realtime_log.audio.codec"):
            audio = extract_audio_from_delta_group(events, warnings)

        assert audio.tolist() == pytest.approx([0.5, -0.5])
        assert len(warnings) == 1
        assert warnings[0].kind == "audio"
        assert warnings[0].line_number == 2
        assert "line 2" in caplog.text

    def test_repeated_decode_reports_each_line_once(self, make_line, pcm16_b64, caplog):
        events = [
            make_line("response.audio.delta", delta="@@@"),
            make_line("response.audio.delta", delta=pcm16_b64([16384])),
        ]
        warnings = []
        with caplog.at_level(logging.WARNING, logger="realtime_log.audio.codec"):
            extract_audio_from_delta_group(events, warnings)
            extract_audio_from_delta_group(events, warnings)

        assert len(warnings) == 1
        assert len(caplog.records) == 1

    def test_missing_and_empty_deltas_ignored(self, make_line, pcm16_b64):
        events = [
            make_line("response.audio.delta"),
            make_line("response.audio.delta", delta=""),
            make_line("response.audio.delta", delta=123),
            make_line("response.audio.delta", delta=pcm16_b64([8192])),
        ]
        audio = extract_audio_from_delta_group(events)
        assert audio.tolist() == pytest.approx([0.25])

    def test_no_data_returns_none(self, make_line):
        assert extract_audio_from_delta_group([]) is None
        assert extract_audio_from_delta_group([make_line("response.audio.delta", delta="!!")]) is None

    def test_cycle_audio_from_sample(self, parsed_sample):
        groups = group_events(parsed_sample.sessions[0].events)
        cycle = [g for g in groups if isinstance(g, ResponseCycle)][0]
        audio = extract_cycle_audio(cycle)
        assert audio.tolist() == pytest.approx([0.5, -0.5, 0.0, 0.25, -1.0])

    def test_cycle_audio_joins_interleaved_runs(self, make_line, pcm16_b64):
        events = [
            make_line("response.created"),
            make_line("response.audio.delta", delta=pcm16_b64([16384])),
            make_line("response.audio_transcript.delta", delta="hi"),
            make_line("response.audio.delta", delta=pcm16_b64([-16384])),
            make_line("response.done"),
        ]
        cycle = group_events(events)[1]
        assert len(cycle.audio_delta_groups) == 2
        assert extract_cycle_audio(cycle).tolist() == pytest.approx([0.5, -0.5])

    def test_cycle_without_audio(self, make_line):
        events = [make_line("response.created"), make_line("response.done")]
        cycle = group_events(events)[1]
        assert extract_cycle_audio(cycle) is None


class TestToPCM16:
    """to_pcm16 inverts decoding exactly for logged samples."""

    def test_inverse_of_decode(self, pcm16_b64):
        samples = [-32768, -16384, 0, 1, 16384, 32767]
        decoded = decode_audio_delta(pcm16_b64(samples))
        pcm = to_pcm16(decoded)
        assert pcm.dtype == np.int16
        assert pcm.tolist() == samples

    def test_clips_out_of_range(self):
        pcm = to_pcm16(np.array([1.5, -2.0], dtype=np.float32))
        assert pcm.tolist() == [32767, -32768]
