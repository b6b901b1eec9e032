# =============================================================================
# SGM — Signal Generation Module
# Subfolder of BCE (Birdsong Codec Engine)
# =============================================================================
#
# Turns speech into the birdsong artifact and serialises buffers to WAV.
#
# Modules:
#   birdsong_encoder.py — pitch-steered AM encoder (speech → birdsong)
#   wav_export.py       — 16-bit PCM WAV writer / reader
#   export_bridge.py    — JSON entry points for browser / Pyodide hosts
#
# Constants live in BCE/SMM/constants.py
# The matching decoder lives in BCE/SVM/
