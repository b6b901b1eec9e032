# =============================================================================
# constants.py — SMM Codec Constants
# =============================================================================
#
# Every value here is part of the artifact format: changing one changes the
# birdsong that existing decoders expect, or the bytes of a stored WAV.
# DO NOT change these without re-checking round-trip correlation
# (python -m BCE.SVM.validate).

import math

# -----------------------------------------------------------------------------
# SAMPLE GRID
# -----------------------------------------------------------------------------

SAMPLE_RATE = 44_100        # Hz — default host rate (input is used at its own rate)
FFT_SIZE    = 2_048         # samples — pitch analysis window
HOP_SIZE    = 256           # samples — host analyser hop (visualisation only)

# Pitch is analysed every PITCH_STEP samples over an FFT_SIZE window and held
# constant across the step (zero-order hold).  Windows shorter than
# MIN_PITCH_WINDOW at the tail are not analysed; those samples stay 0 Hz.
PITCH_STEP       = 512
MIN_PITCH_WINDOW = FFT_SIZE // 2   # = 1024


# -----------------------------------------------------------------------------
# PITCH EXTRACTOR
# -----------------------------------------------------------------------------

PITCH_MIN_HZ     = 70       # lowest fundamental searched  → longest lag
PITCH_MAX_HZ     = 400      # highest fundamental searched → shortest lag
SILENCE_RMS_GATE = 0.02     # window RMS below this = unvoiced / silent
LAG_STRIDE       = 2        # correlation sum visits every other sample
CORRELATION_FLOOR = -1.0    # a lag must beat this to be chosen at all

INITIAL_PITCH_HZ  = 120.0   # held value before the first voiced frame
PITCH_SMOOTHING   = 0.8     # weight of the previous pitch when voiced
PITCH_NEW_WEIGHT  = 0.2     # weight of the detected pitch
# new pitch = PITCH_SMOOTHING * previous + PITCH_NEW_WEIGHT * detected


# -----------------------------------------------------------------------------
# ENCODER (AM modulation)
# -----------------------------------------------------------------------------

INPUT_GAIN       = 3.0      # speech pre-gain before modulation
MODULATION_INDEX = 0.8
# envelope = 1.0 + speech * INPUT_GAIN * MODULATION_INDEX
ENVELOPE_BIAS    = 1.0

SOFT_CLIP_DRIVE  = 0.5      # out = tanh(SOFT_CLIP_DRIVE * envelope * carrier)

VIBRATO_RATE     = 0.001    # radians of LFO per sample index
VIBRATO_DEPTH    = 50.0     # radians of phase offset at LFO peak
# vibrato = sin(i * VIBRATO_RATE) * VIBRATO_DEPTH — timbre only, no decode role

TWO_PI = 2.0 * math.pi


# -----------------------------------------------------------------------------
# FILTERS
# -----------------------------------------------------------------------------

# alpha = sin(omega) / (2 * BIQUAD_Q_DIVISOR) with BIQUAD_Q_DIVISOR = sqrt(2)
BIQUAD_Q_DIVISOR = math.sqrt(2.0)

DC_BLOCKER_R     = 0.995    # pole radius of the decoder's DC blocker


# -----------------------------------------------------------------------------
# PCM / WAV CONTAINER
# -----------------------------------------------------------------------------

PCM_POS_FULL_SCALE = 0x7FFF   # =  32767 — multiplier for samples >= 0
PCM_NEG_FULL_SCALE = 0x8000   # =  32768 — multiplier for samples <  0
# Asymmetric on purpose: +1.0 → 32767 and -1.0 → -32768.  Stored artifacts
# depend on it; keep it.

WAV_FORMAT_PCM     = 1
WAV_BITS_PER_SAMPLE = 16
WAV_BYTES_PER_SAMPLE = WAV_BITS_PER_SAMPLE // 8   # = 2
WAV_HEADER_SIZE    = 44
WAV_FMT_CHUNK_SIZE = 16


# -----------------------------------------------------------------------------
# CARRIER DETECTION  (codec emulator / CLI heuristics)
# -----------------------------------------------------------------------------

# Voiced speech rarely crosses zero faster than ~1.5 kHz on average; every
# preset carrier sits at or above 2 kHz.
BIRDSONG_MIN_CARRIER_HZ = 1_500.0


# -----------------------------------------------------------------------------
# CHUNKED PROCESSING
# -----------------------------------------------------------------------------

# Samples per channel processed between cooperative yields.  Any value gives
# the same result; this only bounds how long a host waits between slices.
CHUNK_SIZE = 8_192


# -----------------------------------------------------------------------------
# ROUND-TRIP CHECK  (codec emulator / self-validation)
# -----------------------------------------------------------------------------

ENVELOPE_WINDOW     = 441      # samples — 10 ms moving average for envelope tracking
SETTLE_SAMPLES      = FFT_SIZE # samples skipped while filters / DC blocker settle
MIN_ROUND_TRIP_CORR = 0.6      # envelope correlation a healthy round trip exceeds

# A bare carrier does not decode to exact silence: the rectified carrier's
# harmonics above Nyquist fold back into the low-pass band.  Measured settled
# residual is 0.04-0.36 RMS across preset pairs (0.089 for the
# default pair).  Speech decoded through the same pair sits well above that.
SILENCE_RESIDUAL_RATIO = 0.25  # decoded silence RMS / decoded speech RMS, upper bound
