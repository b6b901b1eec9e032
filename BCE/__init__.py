# =============================================================================
# Birdsong Codec Engine (BCE)
# Hides a speech signal inside a synthetic birdsong carrier and recovers it.
# =============================================================================
#
# ── PYTHON OWNS THE WHOLE SIGNAL PATH ────────────────────────────────────────
#
# RESPONSIBLE for (Python owns these completely):
#   - Pitch Tracking
#       Frame-wise autocorrelation over the 70-400 Hz voice range, held per
#       512-sample analysis step and smoothed 0.8 / 0.2 between steps.
#   - AM Encoding
#       Band-limited speech drives the amplitude of a phase-continuous
#       carrier whose frequency follows the pitch curve ("the chirp").
#   - Envelope Decoding
#       Rectify -> cascaded biquad low-pass -> DC block -> makeup gain.
#   - WAV construction
#       Canonical 44-byte RIFF/WAVE header + interleaved little-endian int16.
#       Bit-exact with recordings produced by earlier releases.
#
# NOT responsible for:
#   - Microphone capture, file upload, playback scheduling
#       The host hands us decoded float PCM and takes back a buffer or bytes.
#   - Spectrum / bar visualisation, history log, UI state
#   - Confidentiality
#       The "encryption" is steganographic obfuscation only.  Anyone with
#       this engine (or an envelope detector) can recover the speech.
#
# ── DATA FLOW ─────────────────────────────────────────────────────────────────
#   host        → AudioBuffer (float32, N channels, sample_rate)
#   SDM.pitch   → one pitch curve from the down-mix, shared by all channels
#   SGM         → per channel: LPF → envelope → pitch-steered carrier → tanh
#   (playback / storage happens outside the engine)
#   SVM         → per channel: |x| → LPF x N → DC block → gain
#   SGM.wav     → bytes for storage / download
#
# ── Module layout ─────────────────────────────────────────────────────────────
#   SMM/  — constants, preset tables, AudioBuffer, error types
#   SDM/  — DSP primitives: biquad low-pass, DC blocker, pitch extractor
#   SGM/  — encoder pipeline, PCM/WAV codec, JSON bridge for host UIs
#   SVM/  — decoder pipeline, codec emulator CLI, self-validation suite
# =============================================================================

__version__ = "1.0.0"
