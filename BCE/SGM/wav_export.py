# =============================================================================
# wav_export.py — 16-bit PCM WAV container (write / read)
# =============================================================================
#
# Layout written by buffer_to_wav_bytes (all little-endian):
#
#   offset  size  field
#   ------  ----  ---------------------------------------------
#      0     4    "RIFF"
#      4     4    total file length - 8
#      8     4    "WAVE"
#     12     4    "fmt "
#     16     4    16                (fmt chunk size)
#     20     2    1                 (PCM)
#     22     2    num_channels
#     24     4    sample_rate
#     28     4    sample_rate * num_channels * 2   (byte rate)
#     32     2    num_channels * 2                 (block align)
#     34     2    16                (bits per sample)
#     36     4    "data"
#     40     4    length * num_channels * 2        (data length)
#     44    ...   samples, frame-major: ch0[0] ch1[0] ... ch0[1] ch1[1] ...
#
# Float → int16:
#     s = clamp(x, -1, 1)
#     v = s * 32768   if s < 0
#         s * 32767   otherwise
#     stored = v truncated toward zero   (NaN → 0)
#
# The scaling is asymmetric so that -1.0 lands exactly on -32768 and +1.0 on
# +32767.  Artifacts already shared between users depend on these exact
# bytes; do not "fix" it to a symmetric scale.
#
# Reading goes through soundfile, which handles every WAV flavour we are
# likely to be handed (float, 24-bit, WAVE_FORMAT_EXTENSIBLE, ...).

from __future__ import annotations

import logging
import struct
from pathlib import Path

import numpy as np
import soundfile as sf

from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.constants import (
    PCM_NEG_FULL_SCALE,
    PCM_POS_FULL_SCALE,
    WAV_BITS_PER_SAMPLE,
    WAV_BYTES_PER_SAMPLE,
    WAV_FMT_CHUNK_SIZE,
    WAV_FORMAT_PCM,
    WAV_HEADER_SIZE,
)
from BCE.SMM.errors import AudioBufferError

log = logging.getLogger(__name__)


def float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """
    Convert float samples (any shape) to int16 with the asymmetric scale.

    Returns a new int16 array of the same shape.
    """
    x = np.asarray(samples, dtype=np.float64)
    s = np.clip(x, -1.0, 1.0)                      # NaN passes through clip
    v = np.where(s < 0, s * PCM_NEG_FULL_SCALE, s * PCM_POS_FULL_SCALE)
    v = np.nan_to_num(np.trunc(v), nan=0.0)
    return v.astype(np.int16)


def wav_header(num_channels: int, sample_rate: int, length: int) -> bytes:
    """The canonical 44-byte header for `length` frames of 16-bit PCM."""
    block_align = num_channels * WAV_BYTES_PER_SAMPLE
    byte_rate   = sample_rate * block_align
    data_size   = length * block_align

    hdr = struct.pack('<4sI4s', b'RIFF', WAV_HEADER_SIZE - 8 + data_size, b'WAVE')
    fmt = struct.pack('<4sIHHIIHH',
                      b'fmt ', WAV_FMT_CHUNK_SIZE, WAV_FORMAT_PCM, num_channels,
                      sample_rate, byte_rate, block_align, WAV_BITS_PER_SAMPLE)
    dat = struct.pack('<4sI', b'data', data_size)
    return hdr + fmt + dat


def buffer_to_wav_bytes(buffer: AudioBuffer) -> bytes:
    """
    Serialise an AudioBuffer as a complete 16-bit PCM WAV file.

    Deterministic: the same buffer always yields the same bytes.
    Length is always 44 + length * num_channels * 2.
    """
    pcm = float_to_pcm16(buffer.samples)           # (channels, frames)
    # Frame-major interleave: transpose to (frames, channels), then flatten
    body = np.ascontiguousarray(pcm.T).astype('<i2').tobytes()

    header = wav_header(buffer.num_channels, buffer.sample_rate, buffer.length)
    log.debug("wav: %d ch, %d Hz, %d frames, %d bytes",
              buffer.num_channels, buffer.sample_rate, buffer.length,
              len(header) + len(body))
    return header + body


def write_wav(buffer: AudioBuffer, path) -> Path:
    """Write buffer_to_wav_bytes(buffer) to `path`.  Returns the Path."""
    path = Path(path)
    path.write_bytes(buffer_to_wav_bytes(buffer))
    return path


def pcm16_to_float(raw: bytes, num_channels: int, sample_rate: int) -> AudioBuffer:
    """
    Interleaved int16 LE PCM (no header) → AudioBuffer, scaled by 1/32768.

    Used by the JSON bridge, where hosts hand over bare base64 PCM blobs.
    """
    if num_channels < 1:
        raise AudioBufferError(f"num_channels must be >= 1, got {num_channels}")
    frame_bytes = num_channels * WAV_BYTES_PER_SAMPLE
    if len(raw) % frame_bytes:
        raise AudioBufferError(
            f"PCM blob of {len(raw)} bytes is not a whole number of "
            f"{num_channels}-channel 16-bit frames"
        )
    pcm = np.frombuffer(raw, dtype='<i2').reshape(-1, num_channels)
    return AudioBuffer(pcm.T.astype(np.float32) / PCM_NEG_FULL_SCALE, sample_rate)


def load_wav(path) -> AudioBuffer:
    """
    Read any WAV soundfile understands into a float32 AudioBuffer.

    Raises:
        FileNotFoundError: path does not exist
        AudioBufferError:  the file holds no channels
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"WAV file not found: {path}")

    data, sr = sf.read(str(path), dtype='float32', always_2d=True)
    if data.shape[1] == 0:
        raise AudioBufferError(f"{path.name}: no audio channels")
    log.debug("loaded %s: %d ch, %d Hz, %d frames",
              path.name, data.shape[1], sr, data.shape[0])
    return AudioBuffer(data.T, sr)
