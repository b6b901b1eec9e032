# =============================================================================
# presets.py — Encode / Decode preset tables
# =============================================================================
#
# The host never builds parameter sets of its own: it selects one of these
# entries by index, by id, or by cycling through the table.  Ordering is
# part of the interface (index 0 is the default for both tables).
#
# Encode presets shape the artifact:
#   carrier_base_freq  — Hz, carrier frequency at 0 Hz pitch
#   pitch_multiplier   — carrier Hz added per Hz of detected voice pitch
#   input_lpf_cutoff   — Hz, speech band limit before modulation
#
# Decode presets shape the recovery:
#   lpf_cutoff         — Hz, cutoff of every section in the filter chain
#   filter_stages      — number of identical biquad sections in series
#   gain_multiplier    — makeup gain after DC blocking
#
# Validation happens here, once per call, before any sample is touched.
# A bad preset must never produce partial output.

from __future__ import annotations

import math
import numbers
from typing import NamedTuple, Sequence

from BCE.SMM.errors import PresetError


class EncodePreset(NamedTuple):
    id:                str
    name:              str
    description:       str
    carrier_base_freq: float   # Hz
    pitch_multiplier:  float   # unitless
    input_lpf_cutoff:  float   # Hz


class DecodePreset(NamedTuple):
    id:              str
    name:            str
    description:     str
    lpf_cutoff:      float     # Hz
    filter_stages:   int       # >= 1
    gain_multiplier: float     # > 0


# -----------------------------------------------------------------------------
# ENCODE PRESETS
# -----------------------------------------------------------------------------
ENCODE_PRESETS: tuple[EncodePreset, ...] = (
    EncodePreset(
        id="turdus",
        name="TURDUS (STD)",
        description="Standard Blackbird modulation.",
        carrier_base_freq=4000.0,
        pitch_multiplier=16.0,
        input_lpf_cutoff=2500.0,
    ),
    EncodePreset(
        id="erithacus",
        name="ERITHACUS (HI)",
        description="High-pitch Robin variant. Clearer speech.",
        carrier_base_freq=5500.0,
        pitch_multiplier=20.0,
        input_lpf_cutoff=3000.0,
    ),
    EncodePreset(
        id="strix",
        name="STRIX (LO)",
        description="Low-freq Owl rumble. High concealment.",
        carrier_base_freq=2000.0,
        pitch_multiplier=8.0,
        input_lpf_cutoff=1200.0,
    ),
)


# -----------------------------------------------------------------------------
# DECODE PRESETS
# -----------------------------------------------------------------------------
DECODE_PRESETS: tuple[DecodePreset, ...] = (
    DecodePreset(
        id="std",
        name="STANDARD",
        description="Balanced recovery.",
        lpf_cutoff=2500.0,
        filter_stages=3,
        gain_multiplier=8.0,
    ),
    DecodePreset(
        id="wide",
        name="CLARITY (WIDE)",
        description="More treble, some carrier bleed.",
        lpf_cutoff=3500.0,
        filter_stages=2,
        gain_multiplier=6.0,
    ),
    DecodePreset(
        id="narrow",
        name="ISOLATION (NR)",
        description="Aggressive filtering for noisy artifacts.",
        lpf_cutoff=1500.0,
        filter_stages=4,
        gain_multiplier=12.0,
    ),
)

DEFAULT_ENCODE_PRESET = ENCODE_PRESETS[0]
DEFAULT_DECODE_PRESET = DECODE_PRESETS[0]


# ── Lookup ───────────────────────────────────────────────────────────────────

def _lookup(table: Sequence, preset_id: str, kind: str):
    for preset in table:
        if preset.id == preset_id:
            return preset
    raise PresetError(
        f"Unknown {kind} preset: {preset_id!r}\n"
        f"Valid ids: {[p.id for p in table]}"
    )


def get_encode_preset(preset_id: str) -> EncodePreset:
    """Return the encode preset with this id (case-insensitive)."""
    return _lookup(ENCODE_PRESETS, preset_id.lower(), "encode")


def get_decode_preset(preset_id: str) -> DecodePreset:
    """Return the decode preset with this id (case-insensitive)."""
    return _lookup(DECODE_PRESETS, preset_id.lower(), "decode")


# ── Cycling ──────────────────────────────────────────────────────────────────

def cycle_preset_index(index: int, count: int, step: int = 1) -> int:
    """
    Advance a preset index by `step`, wrapping at both ends.

    Cycling forward `count` times from any index returns to that index.
    Negative steps cycle backward.
    """
    if count <= 0:
        raise PresetError(f"cannot cycle through an empty preset table (count={count})")
    return (index + step) % count


def _cycle(table: Sequence, preset, step: int, kind: str):
    try:
        index = table.index(preset)
    except ValueError:
        raise PresetError(
            f"{kind.capitalize()} preset {preset.id!r} is not in the table\n"
            f"Valid ids: {[p.id for p in table]}"
        ) from None
    return table[cycle_preset_index(index, len(table), step)]


def next_encode_preset(preset: EncodePreset, step: int = 1) -> EncodePreset:
    return _cycle(ENCODE_PRESETS, preset, step, "encode")


def next_decode_preset(preset: DecodePreset, step: int = 1) -> DecodePreset:
    return _cycle(DECODE_PRESETS, preset, step, "decode")


# ── Validation ───────────────────────────────────────────────────────────────

def _check_cutoff(label: str, preset_id: str, cutoff: float, sample_rate: int) -> None:
    nyquist = sample_rate / 2
    if not math.isfinite(cutoff) or cutoff <= 0 or cutoff >= nyquist:
        raise PresetError(
            f"{preset_id}: {label}={cutoff!r} Hz must lie strictly between 0 "
            f"and Nyquist ({nyquist:g} Hz at {sample_rate} Hz)"
        )


def validate_encode_preset(preset: EncodePreset, sample_rate: int) -> None:
    """Raise PresetError if `preset` cannot be used at `sample_rate`."""
    if sample_rate <= 0:
        raise PresetError(f"sample_rate must be positive, got {sample_rate!r}")
    if not math.isfinite(preset.carrier_base_freq) or preset.carrier_base_freq <= 0:
        raise PresetError(
            f"{preset.id}: carrier_base_freq must be > 0, got {preset.carrier_base_freq!r}"
        )
    if not math.isfinite(preset.pitch_multiplier):
        raise PresetError(
            f"{preset.id}: pitch_multiplier must be finite, got {preset.pitch_multiplier!r}"
        )
    _check_cutoff("input_lpf_cutoff", preset.id, preset.input_lpf_cutoff, sample_rate)


def validate_decode_preset(preset: DecodePreset, sample_rate: int) -> None:
    """Raise PresetError if `preset` cannot be used at `sample_rate`."""
    if sample_rate <= 0:
        raise PresetError(f"sample_rate must be positive, got {sample_rate!r}")
    _check_cutoff("lpf_cutoff", preset.id, preset.lpf_cutoff, sample_rate)
    stages = preset.filter_stages
    if isinstance(stages, bool) or not isinstance(stages, numbers.Integral) or stages < 1:
        raise PresetError(f"{preset.id}: filter_stages must be an int >= 1, got {stages!r}")
    if not math.isfinite(preset.gain_multiplier) or preset.gain_multiplier <= 0:
        raise PresetError(
            f"{preset.id}: gain_multiplier must be > 0, got {preset.gain_multiplier!r}"
        )


def preset_catalog() -> dict:
    """Both tables as plain dicts, in table order (for JSON hosts and the CLI)."""
    return {
        "encode": [p._asdict() for p in ENCODE_PRESETS],
        "decode": [p._asdict() for p in DECODE_PRESETS],
    }
