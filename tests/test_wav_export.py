"""
Tests for BCE/SGM/wav_export.py — 16-bit PCM WAV writer and readers.

Test organisation:
    TestHeader        — RIFF/WAVE layout and derived sizes
    TestSampleFormat  — float → int16 conversion edge cases, interleaving
    TestFiles         — write_wav / load_wav through soundfile
    TestRawPCM        — pcm16_to_float for headerless blobs
"""

from __future__ import annotations

import struct

import numpy as np
import pytest
import soundfile as sf

from BCE.SGM.wav_export import (
    buffer_to_wav_bytes,
    float_to_pcm16,
    load_wav,
    pcm16_to_float,
    write_wav,
)
from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.errors import AudioBufferError
from conftest import SR, tone


def _body(wav: bytes) -> tuple:
    n = (len(wav) - 44) // 2
    return struct.unpack(f"<{n}h", wav[44:])


class TestHeader:
    def test_stereo_1000_frames_is_4044_bytes(self) -> None:
        wav = buffer_to_wav_bytes(AudioBuffer.silence(2, 1_000, SR))
        assert len(wav) == 4_044
        assert wav[0:4] == b"RIFF"
        assert wav[8:12] == b"WAVE"

    def test_field_values(self) -> None:
        wav = buffer_to_wav_bytes(AudioBuffer.silence(3, 10, 48_000))
        riff_size, = struct.unpack("<I", wav[4:8])
        fmt = struct.unpack("<4sIHHIIHH", wav[12:36])
        data_id, data_size = struct.unpack("<4sI", wav[36:44])
        assert riff_size == len(wav) - 8
        assert fmt == (b"fmt ", 16, 1, 3, 48_000, 48_000 * 3 * 2, 6, 16)
        assert (data_id, data_size) == (b"data", 10 * 3 * 2)

    def test_empty_buffer_is_header_only(self) -> None:
        wav = buffer_to_wav_bytes(AudioBuffer.silence(1, 0, SR))
        assert len(wav) == 44
        assert struct.unpack("<I", wav[40:44])[0] == 0

    def test_serialisation_is_deterministic(self) -> None:
        buf = AudioBuffer(tone(440.0, 0.05), SR)
        assert buffer_to_wav_bytes(buf) == buffer_to_wav_bytes(buf)


class TestSampleFormat:
    def test_full_scale_is_asymmetric(self) -> None:
        wav = buffer_to_wav_bytes(AudioBuffer([1.0, -1.0], SR))
        assert _body(wav) == (32767, -32768)

    def test_out_of_range_clamped(self) -> None:
        wav = buffer_to_wav_bytes(AudioBuffer([3.0, -7.5, np.inf, -np.inf], SR))
        assert _body(wav) == (32767, -32768, 32767, -32768)

    def test_truncates_toward_zero(self) -> None:
        # 0.5 * 32767 = 16383.5 and -0.5 * 32768 = -16384 exactly
        # 1e-4 * 32767 = 3.2767, -1e-4 * 32768 = -3.2768
        wav = buffer_to_wav_bytes(AudioBuffer([0.5, -0.5, 1e-4, -1e-4], SR))
        assert _body(wav) == (16383, -16384, 3, -3)

    def test_nan_becomes_zero(self) -> None:
        assert _body(buffer_to_wav_bytes(AudioBuffer([np.nan, 0.25], SR))) == (0, 8191)

    def test_frames_are_interleaved(self) -> None:
        buf = AudioBuffer.from_channels([[0.5, 0.25], [-0.5, -0.25]], SR)
        assert _body(buffer_to_wav_bytes(buf)) == (16383, -16384, 8191, -8192)

    def test_float_to_pcm16_keeps_shape(self) -> None:
        pcm = float_to_pcm16(np.zeros((2, 5), dtype=np.float32))
        assert pcm.shape == (2, 5)
        assert pcm.dtype == np.int16


class TestFiles:
    def test_soundfile_reads_what_we_write(self, tmp_path) -> None:
        buf = AudioBuffer.from_channels([tone(300.0, 0.05), tone(600.0, 0.05, amp=0.2)], SR)
        path = write_wav(buf, tmp_path / "out.wav")

        data, rate = sf.read(str(path), dtype="int16", always_2d=True)
        assert rate == SR
        assert data.shape == (buf.length, 2)
        assert data.T.tolist() == float_to_pcm16(buf.samples).tolist()

    def test_load_wav_round_trip_within_two_lsb(self, tmp_path) -> None:
        buf = AudioBuffer(tone(300.0, 0.05), 22_050)
        loaded = load_wav(write_wav(buf, tmp_path / "mono.wav"))
        assert loaded.sample_rate == 22_050
        assert loaded.num_channels == 1
        # truncation loses < 1 LSB, the 32767 vs 32768 scale up to another
        assert np.max(np.abs(loaded.samples - buf.samples)) <= 2.0 / 32_768

    def test_load_wav_float_subtype(self, tmp_path) -> None:
        data = np.stack([tone(200.0, 0.02), tone(400.0, 0.02)], axis=1)
        path = tmp_path / "float.wav"
        sf.write(str(path), data, SR, subtype="FLOAT")
        loaded = load_wav(path)
        assert loaded.num_channels == 2
        assert np.array_equal(loaded.samples, data.T)

    def test_load_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_wav(tmp_path / "nope.wav")


class TestRawPCM:
    def test_scaled_by_32768(self) -> None:
        raw = struct.pack("<4h", -32768, 16384, 0, 32767)
        buf = pcm16_to_float(raw, 2, SR)
        assert buf.samples.tolist() == [[-1.0, 0.0], [0.5, 32767 / 32768]]

    def test_partial_frame_rejected(self) -> None:
        with pytest.raises(AudioBufferError):
            pcm16_to_float(b"\x00\x00\x00", 1, SR)

    def test_zero_channels_rejected(self) -> None:
        with pytest.raises(AudioBufferError):
            pcm16_to_float(b"", 0, SR)
