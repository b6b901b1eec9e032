#!/usr/bin/env python3
# =============================================================================
# codec_sim.py — Birdsong Round-Trip Emulator
# =============================================================================
#
# Pushes a WAV file through the whole codec in software (speech → birdsong →
# speech) and reports whether the envelope survived the trip.
#
# Usage:
#   python -m BCE.SVM.codec_sim <path_to_wav>
#   python -m BCE.SVM.codec_sim <path_to_wav> --encode-preset strix --decode-preset narrow
#   python -m BCE.SVM.codec_sim <path_to_wav> --threshold 0.7
#   python -m BCE.SVM.codec_sim <path_to_wav> --out-dir renders/
#
# Output sections:
#   [1] File info         — sample rate, channels, duration
#   [2] Input analysis    — carrier estimate, "already birdsong?" verdict
#   [3] Encode report     — preset, pitch curve range, peak level
#   [4] Decode report     — preset, per-channel envelope correlation
#   [5] VERDICT           — PASS / FAIL with reason
#
# Envelope correlation:
#   both signals are rectified and smoothed with a 10 ms moving average, the
#   first SETTLE_SAMPLES are dropped, and the Pearson correlation of what is
#   left is reported.  Tracking the envelope rather than the waveform makes
#   the score insensitive to the few samples of filter group delay.
#
# =============================================================================

from __future__ import annotations
import sys, os, argparse, logging

import numpy as np

from BCE.SGM.birdsong_encoder import BirdsongEncoder
from BCE.SGM.wav_export import load_wav, write_wav
from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.constants import (
    BIRDSONG_MIN_CARRIER_HZ,
    ENVELOPE_WINDOW,
    MIN_ROUND_TRIP_CORR,
    SETTLE_SAMPLES,
)
from BCE.SMM.presets import (
    DECODE_PRESETS, ENCODE_PRESETS,
    DEFAULT_DECODE_PRESET, DEFAULT_ENCODE_PRESET,
    get_decode_preset, get_encode_preset,
)
from BCE.SVM.birdsong_decoder import decode_from_birdsong

DIVIDER = "=" * 68

# Substrings that mark a file name as an encoded artifact
BIRDSONG_NAME_HINTS = ("bird", "encoded")


# ---------------------------------------------------------------------------
# Analysis helpers (importable)
# ---------------------------------------------------------------------------

def track_envelope(samples: np.ndarray, window: int = ENVELOPE_WINDOW) -> np.ndarray:
    """Rectify and smooth with a `window`-sample moving average (same length)."""
    x = np.abs(np.asarray(samples, dtype=np.float64))
    if window <= 1 or len(x) == 0:
        return x
    kernel = np.full(window, 1.0 / window)
    return np.convolve(x, kernel, mode="same")


def envelope_correlation(
    reference: np.ndarray,
    decoded: np.ndarray,
    settle: int = SETTLE_SAMPLES,
    window: int = ENVELOPE_WINDOW,
) -> float:
    """
    Pearson correlation between the tracked envelopes of two signals.

    Returns 0.0 when either envelope is constant after the settle period
    or too little signal remains to compare.
    """
    n = min(len(reference), len(decoded))
    a = track_envelope(reference[:n], window)[settle:]
    b = track_envelope(decoded[:n], window)[settle:]
    if len(a) < 2:
        return 0.0
    a = a - a.mean()
    b = b - b.mean()
    denom = float(np.sqrt(np.dot(a, a) * np.dot(b, b)))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


def estimate_carrier_hz(samples: np.ndarray, sample_rate: int) -> float:
    """
    Dominant frequency estimate from the zero-crossing rate (Hz).

    Crude, but the birdsong carrier dominates its signal so completely that
    nothing finer is needed to tell it apart from speech.
    """
    x = np.asarray(samples, dtype=np.float64)
    if len(x) < 2:
        return 0.0
    signs = np.signbit(x)
    crossings = int(np.count_nonzero(signs[1:] != signs[:-1]))
    return crossings * sample_rate / (2.0 * len(x))


def looks_like_birdsong(buffer: AudioBuffer) -> bool:
    """True if the down-mix carrier estimate sits above BIRDSONG_MIN_CARRIER_HZ."""
    return estimate_carrier_hz(buffer.downmix(), buffer.sample_rate) > BIRDSONG_MIN_CARRIER_HZ


def birdsong_name_hint(filename: str) -> bool:
    """File-name heuristic for encoded artifacts ('bird' / 'encoded')."""
    name = os.path.basename(filename).lower()
    return any(hint in name for hint in BIRDSONG_NAME_HINTS)


# ---------------------------------------------------------------------------
# Emulator
# ---------------------------------------------------------------------------

def run_sim(
    wav_path: str,
    encode_preset: str = DEFAULT_ENCODE_PRESET.id,
    decode_preset: str = DEFAULT_DECODE_PRESET.id,
    threshold: float = MIN_ROUND_TRIP_CORR,
    out_dir: str | None = None,
) -> bool:
    """
    Run the full round trip on one WAV file.
    Returns True if every channel's envelope correlation beats `threshold`.
    """
    verdict_pass = True
    reasons: list[str] = []

    # -----------------------------------------------------------------------
    # [1] File info
    # -----------------------------------------------------------------------
    print(f"\n{DIVIDER}")
    print(f"  Birdsong Codec Emulator")
    print(DIVIDER)

    if not os.path.exists(wav_path):
        print(f"  [!!] File not found: {wav_path}")
        return False

    enc_preset = get_encode_preset(encode_preset)
    dec_preset = get_decode_preset(decode_preset)

    source = load_wav(wav_path)
    print(f"  File     : {os.path.basename(wav_path)}")
    print(f"  Rate     : {source.sample_rate} Hz")
    print(f"  Channels : {source.num_channels}")
    print(f"  Duration : {source.duration:.2f} s  ({source.length:,} frames)")

    if source.length == 0:
        print(f"  [!!] File holds no audio frames")
        return False

    # -----------------------------------------------------------------------
    # [2] Input analysis
    # -----------------------------------------------------------------------
    print(f"\n  -- Input Analysis --")
    carrier = estimate_carrier_hz(source.downmix(), source.sample_rate)
    print(f"  Carrier estimate  : {carrier:,.0f} Hz  (birdsong above {BIRDSONG_MIN_CARRIER_HZ:,.0f} Hz)")
    print(f"  Name hint         : {'birdsong' if birdsong_name_hint(wav_path) else 'none'}")
    if looks_like_birdsong(source):
        print(f"  [INFO] Input already looks like birdsong; round trip will double-encode")
    else:
        print(f"  [INFO] Input looks like plain audio")

    # -----------------------------------------------------------------------
    # [3] Encode
    # -----------------------------------------------------------------------
    print(f"\n  -- Encode Report --")
    encoder  = BirdsongEncoder(source, enc_preset)
    birdsong = encoder.run()
    curve    = encoder.pitch_curve
    peak     = float(np.max(np.abs(birdsong.samples)))

    print(f"  Preset            : {enc_preset.id}  ({enc_preset.name})")
    print(f"  Carrier range     : {encoder.carrier_frequency(int(np.argmin(curve))):,.0f}"
          f" .. {encoder.carrier_frequency(int(np.argmax(curve))):,.0f} Hz")
    print(f"  Pitch range       : {float(curve.min()):.1f} .. {float(curve.max()):.1f} Hz")
    print(f"  Peak level        : {peak:.4f}")

    if peak >= 1.0:
        verdict_pass = False
        reasons.append(f"encoded peak {peak:.4f} reached full scale")
        print(f"  [FAIL] Soft clip breached")
    else:
        print(f"  [PASS] Output bounded inside (-1, 1)")

    # -----------------------------------------------------------------------
    # [4] Decode
    # -----------------------------------------------------------------------
    print(f"\n  -- Decode Report --")
    decoded = decode_from_birdsong(birdsong, dec_preset)
    print(f"  Preset            : {dec_preset.id}  ({dec_preset.name})")
    print(f"  Threshold         : {threshold:.2f}")

    for ch in range(source.num_channels):
        corr = envelope_correlation(source.channel(ch), decoded.channel(ch))
        if corr > threshold:
            print(f"  [PASS] Ch{ch + 1} envelope correlation {corr:.3f}")
        else:
            verdict_pass = False
            reasons.append(f"Ch{ch + 1}: envelope correlation {corr:.3f} <= {threshold:.2f}")
            print(f"  [FAIL] Ch{ch + 1} envelope correlation {corr:.3f}")

    # --- Optional renders ---
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
        stem = os.path.splitext(os.path.basename(wav_path))[0]
        art  = write_wav(birdsong, os.path.join(out_dir, f"{stem}_artifact.wav"))
        dec  = write_wav(decoded,  os.path.join(out_dir, f"{stem}_decoded.wav"))
        print(f"\n  Wrote {art}")
        print(f"  Wrote {dec}")

    # -----------------------------------------------------------------------
    # [5] Verdict
    # -----------------------------------------------------------------------
    print(f"\n{DIVIDER}")
    if verdict_pass:
        print(f"  VERDICT: PASS — speech envelope survives the round trip")
    else:
        print(f"  VERDICT: FAIL — round trip lost the speech envelope")
        for r in reasons:
            print(f"    - {r}")
    print(f"{DIVIDER}\n")

    return verdict_pass


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Birdsong codec round-trip emulator",
    )
    parser.add_argument("wav", help="Path to a speech WAV file")
    parser.add_argument(
        "--encode-preset", choices=[p.id for p in ENCODE_PRESETS],
        default=DEFAULT_ENCODE_PRESET.id,
        help=f"Encode preset, default {DEFAULT_ENCODE_PRESET.id}",
    )
    parser.add_argument(
        "--decode-preset", choices=[p.id for p in DECODE_PRESETS],
        default=DEFAULT_DECODE_PRESET.id,
        help=f"Decode preset, default {DEFAULT_DECODE_PRESET.id}",
    )
    parser.add_argument(
        "--threshold", type=float, default=MIN_ROUND_TRIP_CORR,
        help=f"Minimum envelope correlation, default {MIN_ROUND_TRIP_CORR}",
    )
    parser.add_argument(
        "--out-dir", default=None,
        help="Also write <stem>_artifact.wav and <stem>_decoded.wav here",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Show debug logging from the codec",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    ok = run_sim(
        wav_path=args.wav,
        encode_preset=args.encode_preset,
        decode_preset=args.decode_preset,
        threshold=args.threshold,
        out_dir=args.out_dir,
    )
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
