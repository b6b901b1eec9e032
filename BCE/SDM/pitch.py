# =============================================================================
# pitch.py — Autocorrelation pitch extractor and per-sample pitch curve
# =============================================================================
#
# extract_pitch(window, sr)
#   1. Silence gate: RMS(window) < 0.02  → 0.0 (caller holds previous pitch).
#   2. For every lag in [floor(sr/400), floor(sr/70)) compute
#          sum_{i = 0, 2, 4, ... < len-lag}  w[i] * w[i+lag]
#   3. Forward scan in increasing lag order, strictly-greater comparison,
#      starting from a best value of -1.  The shortest lag wins ties.
#   4. Return sr / best_lag  (0.0 if no lag beat the floor).
#
#   At 44.1 kHz the search covers lags 110..629 → ~70..400 Hz.  Integer-lag
#   precision is enough: the estimate only steers the carrier offset.
#
# build_pitch_curve(mono, sr)
#   One estimate every PITCH_STEP (512) samples over an FFT_SIZE (2048)
#   window, held constant across the step (zero-order hold):
#
#       voiced : pitch = 0.8 * previous + 0.2 * detected ; previous = pitch
#       silent : pitch = previous
#
#   previous starts at 120 Hz.  Analysis stops at the first window shorter
#   than FFT_SIZE/2; samples after that point keep 0.0 (carrier at base).
#
#   Without the smoothing the carrier would jump between frames and click.

from __future__ import annotations

import logging

import numpy as np

from BCE.SMM.constants import (
    CORRELATION_FLOOR,
    FFT_SIZE,
    INITIAL_PITCH_HZ,
    LAG_STRIDE,
    MIN_PITCH_WINDOW,
    PITCH_MAX_HZ,
    PITCH_MIN_HZ,
    PITCH_NEW_WEIGHT,
    PITCH_SMOOTHING,
    PITCH_STEP,
    SILENCE_RMS_GATE,
)

log = logging.getLogger(__name__)


def lag_range(sample_rate: int) -> range:
    """Candidate periods in samples, shortest (highest pitch) first."""
    return range(sample_rate // PITCH_MAX_HZ, sample_rate // PITCH_MIN_HZ)


def window_rms(window: np.ndarray) -> float:
    if len(window) == 0:
        return 0.0
    w = np.asarray(window, dtype=np.float64)
    return float(np.sqrt(np.dot(w, w) / len(w)))


def lag_correlations(window: np.ndarray, sample_rate: int) -> np.ndarray:
    """
    Correlation sum for every lag in lag_range(sample_rate), same order.

    Lags at or beyond the window length contribute an empty (0.0) sum.
    """
    w = np.asarray(window, dtype=np.float64)
    n = len(w)
    lags = lag_range(sample_rate)
    sums = np.zeros(len(lags), dtype=np.float64)
    for k, lag in enumerate(lags):
        if lag >= n:
            break
        # w[0:n-lag:2] and w[lag:n:2] have the same length
        sums[k] = np.dot(w[0:n - lag:LAG_STRIDE], w[lag:n:LAG_STRIDE])
    return sums


def extract_pitch(window: np.ndarray, sample_rate: int) -> float:
    """
    Estimate the fundamental of one analysis window.

    Args:
        window:      contiguous samples (any length; FFT_SIZE in the encoder)
        sample_rate: Hz

    Returns:
        Pitch in Hz, or 0.0 for silent / unvoiced windows.
    """
    if window_rms(window) < SILENCE_RMS_GATE:
        return 0.0

    lags = lag_range(sample_rate)
    if len(lags) == 0:
        return 0.0

    sums = lag_correlations(window, sample_rate)
    best = int(np.argmax(sums))          # first maximum = shortest lag on ties
    if not sums[best] > CORRELATION_FLOOR:
        return 0.0
    # below 400 Hz sample rates the search starts at lag 0, which always wins
    if lags[best] == 0:
        return 0.0
    return sample_rate / lags[best]


def build_pitch_curve(mono: np.ndarray, sample_rate: int) -> np.ndarray:
    """
    Expand frame-wise pitch estimates to one value per input sample.

    Args:
        mono:        down-mixed input (see AudioBuffer.downmix)
        sample_rate: Hz

    Returns:
        float32 array, len(mono), Hz.  Shared read-only by every channel.
    """
    total = len(mono)
    curve = np.zeros(total, dtype=np.float32)
    if total == 0:
        return curve

    n_steps    = -(-total // PITCH_STEP)     # ceil
    last_pitch = INITIAL_PITCH_HZ
    voiced     = 0
    analysed   = 0

    for step in range(n_steps):
        start = step * PITCH_STEP
        end   = min(start + FFT_SIZE, total)
        if end - start < MIN_PITCH_WINDOW:
            break
        analysed += 1

        pitch = extract_pitch(mono[start:end], sample_rate)
        if pitch == 0.0:
            pitch = last_pitch
        else:
            pitch = last_pitch * PITCH_SMOOTHING + pitch * PITCH_NEW_WEIGHT
            last_pitch = pitch
            voiced += 1

        curve[start:start + PITCH_STEP] = pitch

    log.debug(
        "pitch curve: %d samples, %d/%d steps analysed, %d voiced, final %.1f Hz",
        total, analysed, n_steps, voiced, last_pitch,
    )
    return curve
