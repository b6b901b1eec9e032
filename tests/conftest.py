"""Shared synthetic signals for the BCE test suite."""

from __future__ import annotations

import numpy as np
import pytest

from BCE.SMM.audio_buffer import AudioBuffer

SR = 44_100


def tone(freq: float, seconds: float, amp: float = 0.5, sr: int = SR) -> np.ndarray:
    t = np.arange(int(seconds * sr)) / sr
    return (amp * np.sin(2.0 * np.pi * freq * t)).astype(np.float32)


def speech_like(seconds: float, sr: int = SR, voice_hz: float = 200.0) -> np.ndarray:
    """A voice-pitched tone shaped into 3 Hz syllables, peak 0.3."""
    t = np.arange(int(seconds * sr)) / sr
    syllables = 0.5 * (1.0 - np.cos(2.0 * np.pi * 3.0 * t))
    return (0.3 * syllables * np.sin(2.0 * np.pi * voice_hz * t)).astype(np.float32)


@pytest.fixture
def speech() -> AudioBuffer:
    """One second of mono speech-like signal at 44.1 kHz."""
    return AudioBuffer(speech_like(1.0), SR)


@pytest.fixture
def short_stereo() -> AudioBuffer:
    """0.25 s stereo: speech-like left, 300 Hz voice right."""
    left = speech_like(0.25)
    right = speech_like(0.25, voice_hz=300.0)
    return AudioBuffer.from_channels([left, right], SR)
