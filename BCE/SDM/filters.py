# =============================================================================
# filters.py — Biquad low-pass section and DC blocker
# =============================================================================
#
# BiquadLowPass — 2-pole low-pass from the analog prototype via the bilinear
# transform (RBJ cookbook form):
#
#   omega = 2*pi*fc/fs      alpha = sin(omega) / (2*sqrt(2))
#
#   b0 = (1 - cos)/2    b1 = 1 - cos    b2 = (1 - cos)/2
#   a0 = 1 + alpha      a1 = -2*cos     a2 = 1 - alpha
#
#   y[n] = (b0 x[n] + b1 x[n-1] + b2 x[n-2] - a1 y[n-1] - a2 y[n-2]) / a0
#
# All five coefficients are divided by a0 once at construction, which gives
# unit gain at DC:  (b0+b1+b2) / (1+a1+a2) = 1.
#
# DCBlocker — single-pole high-pass:
#
#   y[n] = x[n] - x[n-1] + r*y[n-1]        r = 0.995
#
# STATE RULES:
#   - One instance per channel per encode/decode call.  History is never
#     shared between channels or carried into the next call.
#   - process() must be called exactly once per sample, in time order.
#   - Cutoff range is NOT checked here.  Presets are validated against the
#     sample rate before any filter is built (see SMM/presets.py).

from __future__ import annotations

import math

import numpy as np

from BCE.SMM.constants import BIQUAD_Q_DIVISOR, DC_BLOCKER_R


class BiquadLowPass:
    """
    Stateful second-order low-pass section.

    Usage:
        lpf = BiquadLowPass(2500.0, 44100)
        y = [lpf.process(x) for x in samples]
    """

    __slots__ = ("cutoff", "sample_rate",
                 "b0", "b1", "b2", "a1", "a2",
                 "x1", "x2", "y1", "y2")

    def __init__(self, cutoff: float, sample_rate: int) -> None:
        self.cutoff      = cutoff
        self.sample_rate = sample_rate

        omega = 2.0 * math.pi * cutoff / sample_rate
        sn    = math.sin(omega)
        cs    = math.cos(omega)
        alpha = sn / (2.0 * BIQUAD_Q_DIVISOR)

        a0 = 1.0 + alpha
        self.b0 = ((1.0 - cs) / 2.0) / a0
        self.b1 = (1.0 - cs) / a0
        self.b2 = ((1.0 - cs) / 2.0) / a0
        self.a1 = (-2.0 * cs) / a0
        self.a2 = (1.0 - alpha) / a0

        # IIR history
        self.x1 = 0.0
        self.x2 = 0.0
        self.y1 = 0.0
        self.y2 = 0.0

    def process(self, sample: float) -> float:
        y = (self.b0 * sample + self.b1 * self.x1 + self.b2 * self.x2
             - self.a1 * self.y1 - self.a2 * self.y2)
        self.x2 = self.x1
        self.x1 = sample
        self.y2 = self.y1
        self.y1 = y
        return y

    def process_block(self, samples) -> np.ndarray:
        """Run a whole block through the section; state carries on afterwards."""
        out = np.empty(len(samples), dtype=np.float64)
        for i, x in enumerate(np.asarray(samples, dtype=np.float64).tolist()):
            out[i] = self.process(x)
        return out

    def dc_gain(self) -> float:
        """Steady-state response to a constant input of 1.0."""
        return (self.b0 + self.b1 + self.b2) / (1.0 + self.a1 + self.a2)


class FilterChain:
    """
    `stages` identical BiquadLowPass sections in series.

    Adding stages steepens roll-off without changing any section's
    coefficients.
    """

    __slots__ = ("sections",)

    def __init__(self, cutoff: float, sample_rate: int, stages: int) -> None:
        self.sections = [BiquadLowPass(cutoff, sample_rate) for _ in range(stages)]

    def process(self, sample: float) -> float:
        for section in self.sections:
            sample = section.process(sample)
        return sample

    def __len__(self) -> int:
        return len(self.sections)


class DCBlocker:
    """Single-pole high-pass that removes the decoder's rectification bias."""

    __slots__ = ("r", "x1", "y1")

    def __init__(self, r: float = DC_BLOCKER_R) -> None:
        self.r  = r
        self.x1 = 0.0
        self.y1 = 0.0

    def process(self, sample: float) -> float:
        y = sample - self.x1 + self.r * self.y1
        self.x1 = sample
        self.y1 = y
        return y
