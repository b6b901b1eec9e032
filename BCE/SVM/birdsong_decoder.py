# =============================================================================
# birdsong_decoder.py — Birdsong → speech envelope detector
# =============================================================================
#
# Per channel, for every sample (strict ascending order):
#
#   1. r = |x|                                    full-wave rectification
#   2. r = lpf_1(r) → lpf_2(r) → ... → lpf_N(r)   N = filter_stages, all at
#                                                 lpf_cutoff, strictly in order
#   3. r = dc_block(r)                            y = x - x1 + 0.995 * y1
#   4. out = r * gain_multiplier
#
# The carrier is never reconstructed.  Rectifying folds the AM envelope down
# to baseband, the low-pass chain strips the carrier (2-5.5 kHz) and its
# harmonics, and the DC blocker removes the 1.0 envelope bias the encoder
# added.  Carrier frequency, pitch and vibrato are all discarded, so any
# encode preset decodes with any decode preset.
#
# Output is NOT clamped: gain can push samples past ±1.  The WAV writer
# clamps at serialisation time.

from __future__ import annotations

import logging

from BCE.SDM.filters import DCBlocker, FilterChain
from BCE.SDM.session import ChunkedPass
from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.constants import CHUNK_SIZE
from BCE.SMM.presets import DEFAULT_DECODE_PRESET, DecodePreset, validate_decode_preset

log = logging.getLogger(__name__)


class BirdsongDecoder(ChunkedPass):
    """
    One decode invocation over one AudioBuffer.

    Usage:
        dec = BirdsongDecoder(birdsong, DECODE_PRESETS[2])
        speech = dec.run()
    """

    def __init__(
        self,
        source: AudioBuffer,
        preset: DecodePreset = DEFAULT_DECODE_PRESET,
    ) -> None:
        validate_decode_preset(preset, source.sample_rate)
        super().__init__(source)

        self.preset = preset
        sr = source.sample_rate
        self._chains   = [FilterChain(preset.lpf_cutoff, sr, preset.filter_stages)
                          for _ in range(source.num_channels)]
        self._blockers = [DCBlocker() for _ in range(source.num_channels)]
        log.debug(
            "decode: preset=%s channels=%d frames=%d rate=%d stages=%d",
            preset.id, source.num_channels, source.length, sr, preset.filter_stages,
        )

    def _render(self, channel: int, start: int, end: int) -> None:
        sections = self._chains[channel].sections
        blocker  = self._blockers[channel]
        gain     = self.preset.gain_multiplier

        block = self.source.channel(channel)[start:end].tolist()
        for k, x in enumerate(block):
            r = abs(x)
            for section in sections:
                r = section.process(r)
            block[k] = blocker.process(r) * gain

        self._out[channel, start:end] = block


def decode_from_birdsong(
    source: AudioBuffer,
    preset: DecodePreset = DEFAULT_DECODE_PRESET,
) -> AudioBuffer:
    """
    Recover the speech envelope from a birdsong buffer.

    Args:
        source: birdsong (any channel count / sample rate)
        preset: one of DECODE_PRESETS

    Returns:
        New AudioBuffer, same sample rate / channels / length as `source`.

    Raises:
        PresetError: preset invalid at source.sample_rate (nothing is processed)

    Non-birdsong input is not rejected; it simply decodes to noise.
    """
    return BirdsongDecoder(source, preset).run(max(source.length, 1))


async def decode_from_birdsong_async(
    source: AudioBuffer,
    preset: DecodePreset = DEFAULT_DECODE_PRESET,
    *,
    chunk_size: int = CHUNK_SIZE,
) -> AudioBuffer:
    """decode_from_birdsong() that yields to the event loop every `chunk_size` samples."""
    return await BirdsongDecoder(source, preset).run_async(chunk_size)
