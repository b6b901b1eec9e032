#!/usr/bin/env python3
# =============================================================================
# validate.py — BCE Self-Validation Suite
# =============================================================================
#
# Run directly:  python -m BCE.SVM.validate
#             or python BCE/SVM/validate.py (from project root)
#
# Tests:
#   1. Constants & presets  — tables intact, validation rejects bad values
#   2. Filters              — unit DC gain, DC blocker removes offsets
#   3. Pitch extractor      — finds a 200 Hz fundamental, gates silence
#   4. Encoder              — bounded output, chunking never changes a sample
#   5. Round trip           — decoded envelope tracks the speech envelope
#   6. WAV container        — header layout and int16 edge values
# =============================================================================

import sys
import os
import struct

# Allow running from project root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import numpy as np

from BCE.SDM.filters import BiquadLowPass, DCBlocker, FilterChain
from BCE.SDM.pitch import build_pitch_curve, extract_pitch
from BCE.SGM.birdsong_encoder import BirdsongEncoder, encode_to_birdsong
from BCE.SGM.wav_export import buffer_to_wav_bytes
from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.constants import (
    DC_BLOCKER_R, FFT_SIZE, MIN_ROUND_TRIP_CORR, PITCH_STEP, SAMPLE_RATE,
    SILENCE_RESIDUAL_RATIO, WAV_HEADER_SIZE,
)
from BCE.SMM.errors import PresetError
from BCE.SMM.presets import (
    DECODE_PRESETS, ENCODE_PRESETS,
    next_encode_preset, validate_decode_preset, validate_encode_preset,
)
from BCE.SVM.birdsong_decoder import decode_from_birdsong
from BCE.SVM.codec_sim import envelope_correlation

PASS = "[PASS]"
FAIL = "[FAIL]"
INFO = "[INFO]"

failures = 0

def check(label: str, condition: bool, detail: str = "") -> bool:
    global failures
    if condition:
        print(f"  {PASS} {label}")
    else:
        print(f"  {FAIL} {label}{(' -- ' + detail) if detail else ''}")
        failures += 1
    return condition


def raises(exc_type, fn, *args) -> bool:
    try:
        fn(*args)
    except exc_type:
        return True
    return False


def speech_like(seconds: float, sr: int = SAMPLE_RATE) -> np.ndarray:
    """200 Hz voice with a 3 Hz syllable envelope, peak 0.3."""
    t = np.arange(int(seconds * sr)) / sr
    syllables = 0.5 * (1.0 - np.cos(2.0 * np.pi * 3.0 * t))
    return (0.3 * syllables * np.sin(2.0 * np.pi * 200.0 * t)).astype(np.float32)


# =============================================================================
# TEST 1 — Constants & Presets
# =============================================================================
print("\n" + "="*60)
print("TEST 1 — Constants & Presets")
print("="*60)

check("SAMPLE_RATE = 44100",        SAMPLE_RATE == 44_100)
check("FFT_SIZE = 2048",            FFT_SIZE == 2_048)
check("PITCH_STEP = FFT_SIZE / 4",  PITCH_STEP * 4 == FFT_SIZE)
check("3 encode presets",           len(ENCODE_PRESETS) == 3, f"got {len(ENCODE_PRESETS)}")
check("3 decode presets",           len(DECODE_PRESETS) == 3, f"got {len(DECODE_PRESETS)}")
check("Encode ids unique",
      len({p.id for p in ENCODE_PRESETS}) == len(ENCODE_PRESETS))
check("Decode ids unique",
      len({p.id for p in DECODE_PRESETS}) == len(DECODE_PRESETS))

for p in ENCODE_PRESETS:
    check(f"Encode '{p.id}' valid at 44.1 kHz",
          not raises(PresetError, validate_encode_preset, p, SAMPLE_RATE))
for p in DECODE_PRESETS:
    check(f"Decode '{p.id}' valid at 44.1 kHz",
          not raises(PresetError, validate_decode_preset, p, SAMPLE_RATE))

check("Cutoff at Nyquist rejected",
      raises(PresetError, validate_decode_preset,
             DECODE_PRESETS[0]._replace(lpf_cutoff=SAMPLE_RATE / 2), SAMPLE_RATE))
check("Zero filter stages rejected",
      raises(PresetError, validate_decode_preset,
             DECODE_PRESETS[0]._replace(filter_stages=0), SAMPLE_RATE))
check("Cycling past the last preset wraps to the first",
      next_encode_preset(ENCODE_PRESETS[-1]) == ENCODE_PRESETS[0])


# =============================================================================
# TEST 2 — Filters
# =============================================================================
print("\n" + "="*60)
print("TEST 2 — Filters")
print("="*60)

for cutoff in (1200.0, 2500.0, 3500.0):
    lpf = BiquadLowPass(cutoff, SAMPLE_RATE)
    check(f"Biquad {cutoff:.0f} Hz: DC gain = 1",
          abs(lpf.dc_gain() - 1.0) < 1e-9, f"got {lpf.dc_gain():.12f}")

chain = FilterChain(2500.0, SAMPLE_RATE, 3)
settled = [chain.process(0.5) for _ in range(4_000)][-1]
check("3-stage chain settles on a constant",
      abs(settled - 0.5) < 1e-6, f"got {settled:.8f}")

blocker = DCBlocker()
check("DC blocker default r = 0.995", blocker.r == DC_BLOCKER_R)
tail = [blocker.process(0.7) for _ in range(5_000)][-1]
check("DC blocker removes a constant offset", abs(tail) < 1e-6, f"got {tail:.3e}")


# =============================================================================
# TEST 3 — Pitch Extractor
# =============================================================================
print("\n" + "="*60)
print("TEST 3 — Pitch Extractor")
print("="*60)

t = np.arange(FFT_SIZE) / SAMPLE_RATE
tone = (0.5 * np.sin(2.0 * np.pi * 200.0 * t)).astype(np.float32)
est  = extract_pitch(tone, SAMPLE_RATE)
print(f"  {INFO} 200 Hz tone → {est:.2f} Hz")
check("200 Hz tone detected within 2%", abs(est - 200.0) < 4.0, f"got {est:.2f}")
check("Silence gated to 0 Hz",
      extract_pitch(np.zeros(FFT_SIZE, dtype=np.float32), SAMPLE_RATE) == 0.0)

curve = build_pitch_curve(np.zeros(10 * PITCH_STEP, dtype=np.float32), SAMPLE_RATE)
check("Silent curve holds the initial 120 Hz",
      float(curve[0]) == 120.0, f"got {float(curve[0])}")
check("Tail beyond the last full window stays 0",
      float(curve[-1]) == 0.0, f"got {float(curve[-1])}")


# =============================================================================
# TEST 4 — Encoder
# =============================================================================
print("\n" + "="*60)
print("TEST 4 — Encoder")
print("="*60)

speech = AudioBuffer(speech_like(0.5), SAMPLE_RATE)

for p in ENCODE_PRESETS:
    out  = encode_to_birdsong(speech, p)
    peak = float(np.max(np.abs(out.samples)))
    check(f"'{p.id}': output bounded inside (-1, 1)", peak < 1.0, f"peak {peak}")
    check(f"'{p.id}': shape preserved",
          out.num_channels == 1 and out.length == speech.length)

whole   = encode_to_birdsong(speech)
chunked = BirdsongEncoder(speech).run(1_000)
check("Chunked encode is bit-identical to whole-buffer encode",
      np.array_equal(whole.samples, chunked.samples))

check("Encoding is deterministic",
      np.array_equal(whole.samples, encode_to_birdsong(speech).samples))


# =============================================================================
# TEST 5 — Round Trip
# =============================================================================
print("\n" + "="*60)
print("TEST 5 — Round Trip")
print("="*60)

speech = AudioBuffer(speech_like(1.0), SAMPLE_RATE)
for ep in ENCODE_PRESETS:
    for dp in DECODE_PRESETS:
        decoded = decode_from_birdsong(encode_to_birdsong(speech, ep), dp)
        corr = envelope_correlation(speech.channel(0), decoded.channel(0))
        print(f"  {INFO} {ep.id:<10} → {dp.id:<7} correlation {corr:.3f}")
        if (ep, dp) == (ENCODE_PRESETS[0], DECODE_PRESETS[0]):
            check("Default presets: envelope correlation above threshold",
                  corr > MIN_ROUND_TRIP_CORR, f"got {corr:.3f}")


def settled_rms(buf: AudioBuffer) -> float:
    x = buf.channel(0)[FFT_SIZE * 4:].astype(np.float64)
    return float(np.sqrt(np.mean(x * x)))

voiced = settled_rms(decode_from_birdsong(encode_to_birdsong(speech)))
silent = AudioBuffer.silence(1, SAMPLE_RATE // 2, SAMPLE_RATE)
quiet  = settled_rms(decode_from_birdsong(encode_to_birdsong(silent)))
print(f"  {INFO} decoded RMS: speech {voiced:.4f}, silence {quiet:.4f} (carrier residual)")
check("Silence decodes well below speech",
      quiet < SILENCE_RESIDUAL_RATIO * voiced,
      f"silence {quiet:.4f} vs speech {voiced:.4f}")


# =============================================================================
# TEST 6 — WAV Container
# =============================================================================
print("\n" + "="*60)
print("TEST 6 — WAV Container")
print("="*60)

stereo = AudioBuffer.silence(2, 1_000, SAMPLE_RATE)
wav = buffer_to_wav_bytes(stereo)
check("44100 Hz / 2 ch / 1000 frames → 4044 bytes", len(wav) == 4_044, f"got {len(wav)}")
check("RIFF magic",  wav[0:4] == b"RIFF")
check("WAVE magic",  wav[8:12] == b"WAVE")
check("RIFF size = total - 8",
      struct.unpack("<I", wav[4:8])[0] == len(wav) - 8)

edges = AudioBuffer(np.array([1.0, -1.0, 2.0, -2.0, 0.5, np.nan], dtype=np.float32),
                    SAMPLE_RATE)
body  = struct.unpack("<6h", buffer_to_wav_bytes(edges)[WAV_HEADER_SIZE:])
check("Edge values → 32767, -32768, clamp, clamp, trunc, NaN → 0",
      body == (32767, -32768, 32767, -32768, 16383, 0), f"got {body}")


# =============================================================================
# Summary
# =============================================================================
print("\n" + "="*60)
if failures == 0:
    print(f"  ALL TESTS PASSED")
else:
    print(f"  {failures} TEST(S) FAILED")
print("="*60 + "\n")
sys.exit(0 if failures == 0 else 1)
