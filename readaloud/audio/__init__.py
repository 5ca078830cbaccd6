"""Audio container helpers.

This package serializes raw synthesized PCM into playable WAV artifacts.
"""

from .wav import SPEECH_PCM_FORMAT, WAV_HEADER_SIZE, PcmFormat, WavHeader, encode_wav, read_wav_header

__all__ = [
    "PcmFormat",
    "SPEECH_PCM_FORMAT",
    "WAV_HEADER_SIZE",
    "WavHeader",
    "encode_wav",
    "read_wav_header",
]
