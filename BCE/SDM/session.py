# =============================================================================
# session.py — ChunkedPass: ordered, resumable per-channel processing
# =============================================================================
#
# Encoder and decoder are both "one state machine per channel, walked over
# the whole buffer in ascending sample order".  ChunkedPass owns the parts
# they share:
#
#   - a pre-sized float32 output array (num_channels x length), allocated once
#   - a cursor: the next sample index every channel expects
#   - process_chunk(offset, length): advance all channels by one slice
#   - iter_chunks / run / run_async: drive the slices to the end
#
# ORDERING GUARANTEE:
#   Chunks must be contiguous and ascending: offset == cursor, always.
#   Re-running, skipping or overlapping a slice would corrupt the recursive
#   IIR history and the carrier phase accumulator, so it raises instead.
#
# The result is identical for any chunk size, including one chunk for the
# whole buffer.  Chunking exists only so an interactive host can interleave
# other work (cooperative yield); it never changes a sample.

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Iterator

import numpy as np

from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.constants import CHUNK_SIZE

log = logging.getLogger(__name__)


class ChunkedPass(ABC):
    """
    Base class for a single encode or decode invocation.

    Subclasses build their per-channel state in __init__ (after calling
    super().__init__) and implement _render(channel, start, end).
    """

    def __init__(self, source: AudioBuffer) -> None:
        self.source  = source
        self._out    = np.zeros((source.num_channels, source.length), dtype=np.float32)
        self._cursor = 0
        self._result: AudioBuffer | None = None

    # ── Progress ─────────────────────────────────────────────────────────────

    @property
    def cursor(self) -> int:
        """Next sample index to be processed (same for every channel)."""
        return self._cursor

    @property
    def done(self) -> bool:
        return self._cursor >= self.source.length

    @property
    def progress(self) -> float:
        """Fraction of samples processed, 0.0 .. 1.0 (1.0 for empty input)."""
        if self.source.length == 0:
            return 1.0
        return self._cursor / self.source.length

    # ── Core ─────────────────────────────────────────────────────────────────

    def process_chunk(self, offset: int, length: int) -> int:
        """
        Process samples [offset, offset + length) of every channel.

        Args:
            offset: must equal self.cursor
            length: number of samples; the final chunk may be shorter

        Returns:
            The new cursor.
        """
        if offset != self._cursor:
            raise ValueError(
                f"chunks must be processed in order: expected offset {self._cursor}, "
                f"got {offset}"
            )
        if length < 0:
            raise ValueError(f"chunk length must be >= 0, got {length}")
        end = offset + length
        if end > self.source.length:
            raise ValueError(
                f"chunk [{offset}, {end}) runs past the end of the buffer "
                f"({self.source.length} samples)"
            )
        if length == 0:
            return self._cursor

        for channel in range(self.source.num_channels):
            self._render(channel, offset, end)
        self._cursor = end
        return self._cursor

    @abstractmethod
    def _render(self, channel: int, start: int, end: int) -> None:
        """Fill self._out[channel, start:end], advancing that channel's state."""

    # ── Drivers ──────────────────────────────────────────────────────────────

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> Iterator[float]:
        """
        Process the remaining samples slice by slice, yielding progress
        (0.0 .. 1.0) after each slice so the caller can do other work.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        while not self.done:
            length = min(chunk_size, self.source.length - self._cursor)
            self.process_chunk(self._cursor, length)
            yield self.progress

    def run(self, chunk_size: int = CHUNK_SIZE) -> AudioBuffer:
        """Process everything that is left and return the output buffer."""
        for _ in self.iter_chunks(chunk_size):
            pass
        return self.result()

    async def run_async(self, chunk_size: int = CHUNK_SIZE) -> AudioBuffer:
        """As run(), but hands control back to the event loop between slices."""
        for _ in self.iter_chunks(chunk_size):
            await asyncio.sleep(0)
        return self.result()

    def result(self) -> AudioBuffer:
        """The finished output.  Raises RuntimeError if samples remain."""
        if not self.done:
            raise RuntimeError(
                f"{type(self).__name__}: {self.source.length - self._cursor} samples "
                f"still unprocessed"
            )
        if self._result is None:
            self._result = AudioBuffer._wrap(self._out, self.source.sample_rate)
            log.debug("%s finished: %r", type(self).__name__, self._result)
        return self._result
