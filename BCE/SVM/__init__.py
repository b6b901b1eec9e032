# =============================================================================
# BCE/SVM/__init__.py — Signal Verification Module
# =============================================================================
#
# Recovers speech from birdsong and checks that the round trip holds.
#
# Sub-modules:
#   birdsong_decoder.py — envelope-detector decoder (birdsong → speech)
#   codec_sim.py        — encode → decode emulator with a PASS/FAIL verdict
#                         (CLI + importable)
#   validate.py         — automated self-check of the whole BCE stack
# =============================================================================
