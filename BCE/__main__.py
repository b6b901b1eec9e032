#!/usr/bin/env python3
# =============================================================================
# __main__.py — Birdsong Codec command line
# =============================================================================
#
# Usage:
#   python -m BCE encode speech.wav                      → speech_artifact.wav
#   python -m BCE encode speech.wav out.wav --preset strix --no-vibrato
#   python -m BCE decode speech_artifact.wav             → speech_artifact_decoded.wav
#   python -m BCE decode bird.wav clean.wav --preset narrow
#   python -m BCE presets
#
# Add -v / --verbose before the sub-command for debug logging from the codec.
# Exit code: 0 on success, 1 on any codec or file error.
# =============================================================================

from __future__ import annotations
import sys, os, argparse, logging

from BCE import __version__
from BCE.SGM.birdsong_encoder import encode_to_birdsong
from BCE.SGM.wav_export import load_wav, write_wav
from BCE.SMM.errors import CodecError
from BCE.SMM.presets import (
    DECODE_PRESETS, ENCODE_PRESETS,
    DEFAULT_DECODE_PRESET, DEFAULT_ENCODE_PRESET,
    get_decode_preset, get_encode_preset,
)
from BCE.SVM.birdsong_decoder import decode_from_birdsong

DIVIDER = "=" * 68

# Suffixes appended to the input stem when no output path is given
ARTIFACT_SUFFIX = "_artifact"
DECODED_SUFFIX  = "_decoded"


def default_output_path(input_path: str, suffix: str) -> str:
    """speech.wav + '_artifact' → speech_artifact.wav (same directory)."""
    stem, _ = os.path.splitext(input_path)
    return f"{stem}{suffix}.wav"


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------

def cmd_encode(args) -> int:
    preset = get_encode_preset(args.preset)
    source = load_wav(args.input)
    out    = encode_to_birdsong(source, preset, vibrato=not args.no_vibrato)
    path   = write_wav(out, args.output or default_output_path(args.input, ARTIFACT_SUFFIX))

    print(f"  [PASS] Encoded {source.num_channels} ch, {source.duration:.2f} s "
          f"with '{preset.id}' → {path}")
    return 0


def cmd_decode(args) -> int:
    preset = get_decode_preset(args.preset)
    source = load_wav(args.input)
    out    = decode_from_birdsong(source, preset)
    path   = write_wav(out, args.output or default_output_path(args.input, DECODED_SUFFIX))

    print(f"  [PASS] Decoded {source.num_channels} ch, {source.duration:.2f} s "
          f"with '{preset.id}' → {path}")
    return 0


def cmd_presets(args) -> int:
    print(f"\n{DIVIDER}")
    print(f"  Encode presets")
    print(DIVIDER)
    print(f"  {'id':<10} {'name':<16} {'carrier':>8} {'pitch x':>8} {'input LPF':>10}")
    print(f"  {'-'*10} {'-'*16} {'-'*8} {'-'*8} {'-'*10}")
    for p in ENCODE_PRESETS:
        print(f"  {p.id:<10} {p.name:<16} {p.carrier_base_freq:>8.0f} "
              f"{p.pitch_multiplier:>8.0f} {p.input_lpf_cutoff:>10.0f}")

    print(f"\n{DIVIDER}")
    print(f"  Decode presets")
    print(DIVIDER)
    print(f"  {'id':<10} {'name':<16} {'LPF':>8} {'stages':>8} {'gain':>10}")
    print(f"  {'-'*10} {'-'*16} {'-'*8} {'-'*8} {'-'*10}")
    for p in DECODE_PRESETS:
        print(f"  {p.id:<10} {p.name:<16} {p.lpf_cutoff:>8.0f} "
              f"{p.filter_stages:>8d} {p.gain_multiplier:>10.0f}")
    print()
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="birdsong",
        description="Hide speech inside synthetic birdsong, and get it back out",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Show debug logging from the codec",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Speech WAV → birdsong WAV")
    enc.add_argument("input", help="Speech WAV file")
    enc.add_argument("output", nargs="?", default=None,
                     help=f"Output WAV, default <input>{ARTIFACT_SUFFIX}.wav")
    enc.add_argument("--preset", choices=[p.id for p in ENCODE_PRESETS],
                     default=DEFAULT_ENCODE_PRESET.id,
                     help=f"Encode preset, default {DEFAULT_ENCODE_PRESET.id}")
    enc.add_argument("--no-vibrato", action="store_true",
                     help="Disable the slow carrier waver")
    enc.set_defaults(func=cmd_encode)

    dec = sub.add_parser("decode", help="Birdsong WAV → speech WAV")
    dec.add_argument("input", help="Birdsong WAV file")
    dec.add_argument("output", nargs="?", default=None,
                     help=f"Output WAV, default <input>{DECODED_SUFFIX}.wav")
    dec.add_argument("--preset", choices=[p.id for p in DECODE_PRESETS],
                     default=DEFAULT_DECODE_PRESET.id,
                     help=f"Decode preset, default {DEFAULT_DECODE_PRESET.id}")
    dec.set_defaults(func=cmd_decode)

    lst = sub.add_parser("presets", help="List the preset tables")
    lst.set_defaults(func=cmd_presets)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        return args.func(args)
    except (CodecError, OSError, RuntimeError) as exc:
        # soundfile reports unreadable containers as RuntimeError subclasses
        print(f"  [!!] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
