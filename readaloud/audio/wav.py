"""Byte-exact WAV container encoding for raw provider PCM.

Responsibilities:
- Wrap raw little-endian linear PCM in the canonical 44-byte RIFF/WAVE header.
- Decode that header back for verification and duration reporting.
"""

from __future__ import annotations

from dataclasses import dataclass
import struct


WAV_HEADER_SIZE = 44
_PCM_FORMAT_TAG = 1
_FMT_CHUNK_SIZE = 16
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(frozen=True, slots=True)
class PcmFormat:
    """Sample layout of raw PCM bytes.

    Attributes:
        sample_rate: Samples per second per channel.
        channels: Interleaved channel count.
        bits_per_sample: Sample width in bits.
    """

    sample_rate: int = 24000
    channels: int = 1
    bits_per_sample: int = 16

    @property
    def block_align(self) -> int:
        return self.channels * self.bits_per_sample // 8

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align


SPEECH_PCM_FORMAT = PcmFormat()


@dataclass(frozen=True, slots=True)
class WavHeader:
    """Decoded fields of a canonical 44-byte WAV header."""

    riff_size: int
    audio_format: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def duration_seconds(self) -> float:
        if self.byte_rate <= 0:
            return 0.0
        return self.data_size / float(self.byte_rate)


def encode_wav(pcm: bytes, pcm_format: PcmFormat = SPEECH_PCM_FORMAT) -> bytes:
    """Return `pcm` prefixed with a canonical WAV header; output is `44 + len(pcm)` bytes."""

    data_size = len(pcm)
    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        _FMT_CHUNK_SIZE,
        _PCM_FORMAT_TAG,
        pcm_format.channels,
        pcm_format.sample_rate,
        pcm_format.byte_rate,
        pcm_format.block_align,
        pcm_format.bits_per_sample,
        b"data",
        data_size,
    )
    return header + bytes(pcm)


def read_wav_header(data: bytes) -> WavHeader:
    """Decode the canonical header written by `encode_wav`.

    Raises:
        ValueError: If `data` does not start with a canonical PCM WAV header.
    """

    if len(data) < WAV_HEADER_SIZE:
        raise ValueError("WAV payload is shorter than the 44-byte header.")
    (
        riff_id,
        riff_size,
        wave_id,
        fmt_id,
        fmt_size,
        audio_format,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_id,
        data_size,
    ) = _HEADER.unpack_from(data)
    if (riff_id, wave_id, fmt_id, data_id) != (b"RIFF", b"WAVE", b"fmt ", b"data"):
        raise ValueError("WAV payload is missing RIFF/WAVE/fmt/data identifiers.")
    if fmt_size != _FMT_CHUNK_SIZE:
        raise ValueError(f"Unsupported WAV fmt chunk size: {fmt_size}.")
    return WavHeader(
        riff_size=riff_size,
        audio_format=audio_format,
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_size=data_size,
    )
