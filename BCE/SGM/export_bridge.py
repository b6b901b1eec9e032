# =============================================================================
# BCE/SGM/export_bridge.py — JSON / base64 bridge for browser hosts (Pyodide)
# =============================================================================
#
# Thin wrappers that let a JavaScript host drive the codec without touching
# numpy objects directly.  Everything crosses the boundary as JSON strings.
#
# Entry points:
#
#   encode_pcm_json(samples_json) -> str
#   decode_pcm_json(samples_json) -> str
#       samples_json : JSON string
#                      {sample_rate: int,
#                       channels:    [[float, ...], ...],   one list per channel
#                         or
#                       pcm_b64:      str, base64 of interleaved int16 LE PCM
#                       num_channels: int (with pcm_b64, default 1)
#                       preset:      str (optional, preset id),
#                       vibrato:     bool (optional, encode only)}
#       returns      : JSON string
#                      {wav_b64, sample_rate, num_channels, n_samples, preset}
#                      wav_b64 is a complete base64-encoded 16-bit PCM WAV
#
#   preset_catalog_json() -> str
#       returns      : JSON string {encode: [...], decode: [...]}
#
# The JavaScript caller:
#   1. Copies getChannelData(c) of each channel into plain arrays, or sends
#      an Int16Array of interleaved samples as pcm_b64
#   2. Calls encode_pcm_json / decode_pcm_json
#   3. Turns wav_b64 into a Blob for playback or download
#
# On any failure the *_json functions return {error, traceback} instead of
# raising, so the host never has to catch a PythonError.
# =============================================================================

import base64
import json

from BCE.SGM.birdsong_encoder import encode_to_birdsong
from BCE.SGM.wav_export import buffer_to_wav_bytes, pcm16_to_float
from BCE.SMM.audio_buffer import AudioBuffer
from BCE.SMM.constants import SAMPLE_RATE
from BCE.SMM.presets import (
    DEFAULT_DECODE_PRESET,
    DEFAULT_ENCODE_PRESET,
    get_decode_preset,
    get_encode_preset,
    preset_catalog,
)
from BCE.SVM.birdsong_decoder import decode_from_birdsong


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _buffer_from_request(request):
    sample_rate = int(request.get("sample_rate", SAMPLE_RATE))
    if "pcm_b64" in request:
        raw = base64.b64decode(request["pcm_b64"], validate=True)
        return pcm16_to_float(raw, int(request.get("num_channels", 1)), sample_rate)
    channels = request.get("channels")
    if not channels:
        raise ValueError("request must contain a non-empty 'channels' list or 'pcm_b64'")
    return AudioBuffer.from_channels(channels, sample_rate)


def _wav_response(buffer, preset_id):
    wav = buffer_to_wav_bytes(buffer)
    return {
        "wav_b64":      base64.b64encode(wav).decode("ascii"),
        "sample_rate":  buffer.sample_rate,
        "num_channels": buffer.num_channels,
        "n_samples":    buffer.length,
        "preset":       preset_id,
    }


def _safe(fn, *args):
    try:
        return json.dumps(fn(*args))
    except Exception as _exc:
        import traceback as _tb
        return json.dumps({
            "error":     str(_exc),
            "traceback": _tb.format_exc(),
        })


# ---------------------------------------------------------------------------
# Public bridge API
# ---------------------------------------------------------------------------

def encode_pcm(request):
    """
    Encode a speech request dict → response dict (see module header).

    Raises PresetError / AudioBufferError / ValueError on bad input.
    """
    preset_id = request.get("preset") or DEFAULT_ENCODE_PRESET.id
    preset    = get_encode_preset(preset_id)
    source    = _buffer_from_request(request)
    vibrato   = bool(request.get("vibrato", True))
    return _wav_response(encode_to_birdsong(source, preset, vibrato=vibrato), preset.id)


def decode_pcm(request):
    """Decode a birdsong request dict → response dict (see module header)."""
    preset_id = request.get("preset") or DEFAULT_DECODE_PRESET.id
    preset    = get_decode_preset(preset_id)
    source    = _buffer_from_request(request)
    return _wav_response(decode_from_birdsong(source, preset), preset.id)


def encode_pcm_json(samples_json):
    """Safe Pyodide entry point for encode_pcm.  Always returns a JSON string."""
    return _safe(lambda s: encode_pcm(json.loads(s)), samples_json)


def decode_pcm_json(samples_json):
    """Safe Pyodide entry point for decode_pcm.  Always returns a JSON string."""
    return _safe(lambda s: decode_pcm(json.loads(s)), samples_json)


def preset_catalog_json():
    """Both preset tables as JSON, for populating the host's preset picker."""
    return _safe(preset_catalog)
