# =============================================================================
# errors.py — BCE error types
# =============================================================================
#
# Every failure inside the engine is a local, deterministic computation error.
# Retrying with the same input raises the same error, so there is no retry
# machinery anywhere in BCE.


class CodecError(Exception):
    """Base class for all Birdsong Codec Engine errors."""


class PresetError(CodecError, ValueError):
    """A preset is unknown or its parameters are invalid for the sample rate."""


class AudioBufferError(CodecError, ValueError):
    """Samples handed to AudioBuffer do not form a valid multi-channel buffer."""
