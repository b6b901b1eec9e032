# =============================================================================
# BCE/SMM/__init__.py — Signal Mapping Module
# =============================================================================
#
# The SMM is the single source of truth for the codec's numeric standards:
# sample-rate defaults, analysis window sizes, modulation constants, the
# encode/decode preset tables, and the AudioBuffer value type every other
# module passes around.
#
# All other BCE sub-modules (SDM, SGM, SVM) import exclusively from here.
# Never define codec constants outside this module.
#
# Sub-modules:
#   constants.py     — timing, modulation and PCM constants
#   presets.py       — ENCODE_PRESETS / DECODE_PRESETS, validation, cycling
#   audio_buffer.py  — immutable multi-channel float PCM buffer
#   errors.py        — CodecError hierarchy
# =============================================================================
