# =============================================================================
# birdsong_encoder.py — Speech → birdsong AM encoder
# =============================================================================
#
# Per channel, for every sample i (strict ascending order):
#
#   A. s        = lpf(x[i])                       band-limit at input_lpf_cutoff
#   B. envelope = 1.0 + s * 3.0 * 0.8             bias keeps AM mostly positive
#   C. f        = carrier_base_freq + pitch[i] * pitch_multiplier
#      phase   += 2*pi * f / sample_rate          phase-continuous oscillator
#   D. vibrato  = sin(i * 0.001) * 50             slow waver, timbre only
#   E. out[i]   = tanh(0.5 * envelope * sin(phase + vibrato))
#
# The pitch curve is computed ONCE per call from the down-mix of all input
# channels and shared read-only.  Low-pass history and carrier phase are
# per channel and start fresh on every call.
#
# Because the pitch curve follows the speaker's voice, the carrier chirps
# up and down with intonation.  That is what makes it sound like a bird
# rather than a test tone.
#
# tanh bounds every output sample to (-1, 1) even when the envelope
# overshoots, so no hard clipping ever reaches the WAV writer.

from __future__ import annotations

import logging
import math

from BCE.SDM.filters import BiquadLowPass
from BCE.SDM.pitch import build_pitch_curve
from BCE.SDM.session import ChunkedPass
from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.constants import (
    CHUNK_SIZE,
    ENVELOPE_BIAS,
    INPUT_GAIN,
    MODULATION_INDEX,
    SOFT_CLIP_DRIVE,
    TWO_PI,
    VIBRATO_DEPTH,
    VIBRATO_RATE,
)
from BCE.SMM.presets import DEFAULT_ENCODE_PRESET, EncodePreset, validate_encode_preset

log = logging.getLogger(__name__)


class _CarrierState:
    """Per-channel encoder state: input low-pass + oscillator phase."""

    __slots__ = ("lpf", "phase")

    def __init__(self, cutoff: float, sample_rate: int) -> None:
        self.lpf   = BiquadLowPass(cutoff, sample_rate)
        self.phase = 0.0


class BirdsongEncoder(ChunkedPass):
    """
    One encode invocation over one AudioBuffer.

    Usage:
        enc = BirdsongEncoder(speech, ENCODE_PRESETS[1])
        for progress in enc.iter_chunks(4096):
            ui.update(progress)
        birdsong = enc.result()
    """

    def __init__(
        self,
        source: AudioBuffer,
        preset: EncodePreset = DEFAULT_ENCODE_PRESET,
        vibrato: bool = True,
    ) -> None:
        # Fail fast: no pitch analysis, no allocation for a bad preset.
        validate_encode_preset(preset, source.sample_rate)
        super().__init__(source)

        self.preset  = preset
        self.vibrato = vibrato

        sr = source.sample_rate
        self.pitch_curve = build_pitch_curve(source.downmix(), sr)
        self.pitch_curve.setflags(write=False)

        self._states = [
            _CarrierState(preset.input_lpf_cutoff, sr)
            for _ in range(source.num_channels)
        ]
        log.debug(
            "encode: preset=%s channels=%d frames=%d rate=%d vibrato=%s",
            preset.id, source.num_channels, source.length, sr, vibrato,
        )

    def carrier_frequency(self, index: int) -> float:
        """Instantaneous carrier frequency (Hz) at sample `index`."""
        return (self.preset.carrier_base_freq
                + float(self.pitch_curve[index]) * self.preset.pitch_multiplier)

    def _render(self, channel: int, start: int, end: int) -> None:
        state = self._states[channel]
        lpf   = state.lpf
        phase = state.phase

        sr        = self.source.sample_rate
        base_freq = self.preset.carrier_base_freq
        pitch_mul = self.preset.pitch_multiplier
        vibrato   = self.vibrato

        speech = self.source.channel(channel)[start:end].tolist()
        pitch  = self.pitch_curve[start:end].tolist()
        block  = [0.0] * (end - start)

        for k, x in enumerate(speech):
            i = start + k

            # A + B. band-limit and bias the speech into an envelope
            envelope = ENVELOPE_BIAS + lpf.process(x) * INPUT_GAIN * MODULATION_INDEX

            # C. pitch-steered carrier
            carrier_freq = base_freq + pitch[k] * pitch_mul
            phase += TWO_PI * carrier_freq / sr

            # D. vibrato
            wobble = math.sin(i * VIBRATO_RATE) * VIBRATO_DEPTH if vibrato else 0.0

            # E. modulate + soft clip
            block[k] = math.tanh(envelope * math.sin(phase + wobble) * SOFT_CLIP_DRIVE)

        state.phase = phase
        self._out[channel, start:end] = block


# -----------------------------------------------------------------------------
# Convenience entry points
# -----------------------------------------------------------------------------

def encode_to_birdsong(
    source: AudioBuffer,
    preset: EncodePreset = DEFAULT_ENCODE_PRESET,
    *,
    vibrato: bool = True,
) -> AudioBuffer:
    """
    Encode speech into birdsong.

    Args:
        source:  speech, any channel count, any sample rate the preset allows
        preset:  one of ENCODE_PRESETS
        vibrato: add the slow phase waver (no effect on decodability)

    Returns:
        New AudioBuffer, same sample rate / channels / length as `source`.
        Every sample lies strictly inside (-1, 1).

    Raises:
        PresetError: preset invalid at source.sample_rate (nothing is processed)
    """
    return BirdsongEncoder(source, preset, vibrato).run(max(source.length, 1))


async def encode_to_birdsong_async(
    source: AudioBuffer,
    preset: EncodePreset = DEFAULT_ENCODE_PRESET,
    *,
    vibrato: bool = True,
    chunk_size: int = CHUNK_SIZE,
) -> AudioBuffer:
    """encode_to_birdsong() that yields to the event loop every `chunk_size` samples."""
    return await BirdsongEncoder(source, preset, vibrato).run_async(chunk_size)
