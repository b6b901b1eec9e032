# =============================================================================
# SDM — Signal DSP Module
# Subfolder of BCE (Birdsong Codec Engine)
# =============================================================================
#
# Sample-accurate building blocks shared by the encoder (SGM) and the
# decoder (SVM).  Every object here is a strict sequential state machine:
# feed it samples in ascending time order, one instance per channel per call.
#
# Modules:
#   filters.py — BiquadLowPass, FilterChain, DCBlocker
#   session.py — ChunkedPass: ordered, resumable per-channel processing
#   pitch.py   — autocorrelation pitch extractor + per-sample pitch curve
#
# Constants live in BCE/SMM/constants.py
# =============================================================================
