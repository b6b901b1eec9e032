"""
Tests for BCE/SGM/export_bridge.py — JSON entry points for browser hosts.

Test organisation:
    TestEncodeBridge   — encode_pcm_json success payload
    TestDecodeBridge   — decode_pcm_json success payload
    TestRawPCMBridge   — pcm_b64 requests (interleaved int16 LE)
    TestBridgeErrors   — failures come back as {error, traceback}, never raise
    TestCatalogBridge  — preset_catalog_json
"""

from __future__ import annotations

import base64
import json

import numpy as np

from BCE.SGM.birdsong_encoder import encode_to_birdsong
from BCE.SGM.export_bridge import (
    decode_pcm_json,
    encode_pcm_json,
    preset_catalog_json,
)
from BCE.SGM.wav_export import buffer_to_wav_bytes, pcm16_to_float
from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.presets import DECODE_PRESETS, ENCODE_PRESETS
from BCE.SVM.birdsong_decoder import decode_from_birdsong
from conftest import SR, speech_like


def _request(channels, preset=None, **extra) -> str:
    req = {"sample_rate": SR, "channels": [list(map(float, ch)) for ch in channels]}
    if preset is not None:
        req["preset"] = preset
    req.update(extra)
    return json.dumps(req)


class TestEncodeBridge:
    def test_payload_fields(self) -> None:
        voice = speech_like(0.05)
        result = json.loads(encode_pcm_json(_request([voice, voice])))
        assert result["sample_rate"] == SR
        assert result["num_channels"] == 2
        assert result["n_samples"] == len(voice)
        assert result["preset"] == "turdus"

    def test_wav_matches_library_encode(self) -> None:
        voice = speech_like(0.05)
        result = json.loads(encode_pcm_json(_request([voice], preset="strix")))
        expected = buffer_to_wav_bytes(
            encode_to_birdsong(AudioBuffer(voice, SR), ENCODE_PRESETS[2])
        )
        assert base64.b64decode(result["wav_b64"]) == expected

    def test_vibrato_can_be_disabled(self) -> None:
        voice = speech_like(0.05)
        with_vib = json.loads(encode_pcm_json(_request([voice])))
        without = json.loads(encode_pcm_json(_request([voice], vibrato=False)))
        assert with_vib["wav_b64"] != without["wav_b64"]


class TestDecodeBridge:
    def test_decode_payload(self) -> None:
        tone = np.sin(np.arange(2_000) * 0.9).astype(np.float32) * 0.5
        result = json.loads(decode_pcm_json(_request([tone], preset="NARROW")))
        assert result["preset"] == "narrow"
        wav = base64.b64decode(result["wav_b64"])
        assert wav[:4] == b"RIFF"
        assert len(wav) == 44 + 2_000 * 2


def _pcm_request(channels, **extra) -> tuple[str, bytes]:
    frames = np.stack([np.asarray(ch) for ch in channels], axis=1)
    raw = np.round(frames * 32767).astype("<i2").tobytes()
    req = {"sample_rate": SR, "num_channels": len(channels),
           "pcm_b64": base64.b64encode(raw).decode("ascii")}
    req.update(extra)
    return json.dumps(req), raw


class TestRawPCMBridge:
    def test_stereo_decode_matches_library(self) -> None:
        left = np.sin(np.arange(2_000) * 0.9) * 0.5
        right = np.sin(np.arange(2_000) * 0.7) * 0.25
        request, raw = _pcm_request([left, right], preset="wide")
        result = json.loads(decode_pcm_json(request))
        assert result["num_channels"] == 2
        assert result["n_samples"] == 2_000
        expected = buffer_to_wav_bytes(
            decode_from_birdsong(pcm16_to_float(raw, 2, SR), DECODE_PRESETS[1])
        )
        assert base64.b64decode(result["wav_b64"]) == expected

    def test_mono_is_the_default_layout(self) -> None:
        request, _ = _pcm_request([speech_like(0.05)])
        req = json.loads(request)
        del req["num_channels"]
        result = json.loads(encode_pcm_json(json.dumps(req)))
        assert result["num_channels"] == 1
        assert result["n_samples"] == len(speech_like(0.05))

    def test_partial_frame_is_reported(self) -> None:
        request = json.dumps({"num_channels": 2,
                              "pcm_b64": base64.b64encode(b"\x00" * 6).decode("ascii")})
        result = json.loads(decode_pcm_json(request))
        assert "whole number" in result["error"]


class TestBridgeErrors:
    def test_unknown_preset(self) -> None:
        result = json.loads(encode_pcm_json(_request([[0.0] * 10], preset="crow")))
        assert "Unknown encode preset" in result["error"]
        assert "Traceback" in result["traceback"]

    def test_malformed_json(self) -> None:
        result = json.loads(decode_pcm_json("{not json"))
        assert set(result) == {"error", "traceback"}

    def test_missing_channels(self) -> None:
        result = json.loads(decode_pcm_json(json.dumps({"sample_rate": SR})))
        assert "channels" in result["error"]

    def test_ragged_channels(self) -> None:
        result = json.loads(encode_pcm_json(_request([[0.0] * 10, [0.0] * 9])))
        assert "same length" in result["error"]


class TestCatalogBridge:
    def test_catalog(self) -> None:
        catalog = json.loads(preset_catalog_json())
        assert [p["id"] for p in catalog["encode"]] == ["turdus", "erithacus", "strix"]
        assert catalog["decode"][0]["gain_multiplier"] == 8.0
