# =============================================================================
# audio_buffer.py — Immutable multi-channel float PCM buffer
# =============================================================================
#
# The one value type that crosses every module boundary in BCE.
#
#   samples     : numpy float32, shape (num_channels, length), read-only
#   sample_rate : int Hz, shared by every channel
#   length      : frames per channel (identical across channels by shape)
#
# float32 matches what browser hosts (Web Audio AudioBuffer) and soundfile
# hand us, so a WAV serialised from the same float samples is byte-identical
# whichever host produced them.
#
# Buffers are produced once and never mutated.  Pipelines allocate a fresh
# output array at the known length and wrap it when finished.

from __future__ import annotations

from typing import Sequence

import numpy as np

from BCE.SMM.errors import AudioBufferError


class AudioBuffer:
    """
    Immutable multi-channel float PCM.

    Usage:
        buf = AudioBuffer(np.zeros((2, 44100)), sample_rate=44100)
        left = buf.channel(0)
        mono = buf.downmix()
    """

    __slots__ = ("_samples", "_sample_rate")

    def __init__(self, samples, sample_rate: int) -> None:
        """
        Args:
            samples:     array-like, shape (num_channels, length) or (length,)
                         for mono.  Copied to float32.
            sample_rate: Hz, positive integer.
        """
        sample_rate = int(sample_rate)
        if sample_rate <= 0:
            raise AudioBufferError(f"sample_rate must be positive, got {sample_rate}")

        data = np.array(samples, dtype=np.float32, copy=True)
        if data.ndim == 1:
            data = data.reshape(1, -1)
        if data.ndim != 2:
            raise AudioBufferError(
                f"samples must be 1-D (mono) or 2-D (channels, frames), got {data.ndim}-D"
            )
        if data.shape[0] < 1:
            raise AudioBufferError("an AudioBuffer needs at least one channel")

        data.setflags(write=False)
        self._samples = data
        self._sample_rate = sample_rate

    # ── Constructors ─────────────────────────────────────────────────────────

    @classmethod
    def from_channels(cls, channels: Sequence, sample_rate: int) -> "AudioBuffer":
        """Build from a list of per-channel sample sequences (equal lengths)."""
        if len(channels) == 0:
            raise AudioBufferError("an AudioBuffer needs at least one channel")
        lengths = {len(ch) for ch in channels}
        if len(lengths) != 1:
            raise AudioBufferError(
                f"all channels must have the same length, got {sorted(lengths)}"
            )
        return cls(np.vstack([np.asarray(ch, dtype=np.float32) for ch in channels]),
                   sample_rate)

    @classmethod
    def silence(cls, num_channels: int, length: int, sample_rate: int) -> "AudioBuffer":
        return cls(np.zeros((num_channels, length), dtype=np.float32), sample_rate)

    @classmethod
    def _wrap(cls, samples: np.ndarray, sample_rate: int) -> "AudioBuffer":
        # Internal fast path: take ownership of a freshly allocated float32
        # array without copying it.  Callers must not keep a writable alias.
        buf = cls.__new__(cls)
        samples.setflags(write=False)
        buf._samples = samples
        buf._sample_rate = sample_rate
        return buf

    # ── Properties ───────────────────────────────────────────────────────────

    @property
    def samples(self) -> np.ndarray:
        """Read-only float32 array, shape (num_channels, length)."""
        return self._samples

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def num_channels(self) -> int:
        return self._samples.shape[0]

    @property
    def length(self) -> int:
        """Frames per channel."""
        return self._samples.shape[1]

    @property
    def duration(self) -> float:
        """Seconds."""
        return self.length / self._sample_rate

    def channel(self, index: int) -> np.ndarray:
        """Read-only view of one channel."""
        return self._samples[index]

    # ── Derived buffers ──────────────────────────────────────────────────────

    def downmix(self) -> np.ndarray:
        """
        Per-sample average of all channels as float32.

        Mono buffers return their only channel unchanged.
        """
        if self.num_channels == 1:
            return self._samples[0]
        mix = self._samples.astype(np.float64).sum(axis=0) / self.num_channels
        return mix.astype(np.float32)

    def empty_like(self) -> "AudioBuffer":
        """Zero-frame buffer with the same channel count and sample rate."""
        return AudioBuffer.silence(self.num_channels, 0, self._sample_rate)

    # ── Dunder ───────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return self.length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AudioBuffer):
            return NotImplemented
        return (self._sample_rate == other._sample_rate
                and self._samples.shape == other._samples.shape
                and np.array_equal(self._samples, other._samples))

    __hash__ = None

    def __repr__(self) -> str:
        return (f"AudioBuffer(num_channels={self.num_channels}, "
                f"length={self.length}, sample_rate={self._sample_rate})")
