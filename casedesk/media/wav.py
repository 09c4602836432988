"""
Canonical WAV encoding and decoding.
Float samples in [-1, 1] are written as 16-bit little-endian PCM behind a
44-byte RIFF header, the layout accepted by Whisper-style transcription APIs.

Samples are held in ``array`` buffers (4 bytes per float, 2 per PCM value)
rather than lists of Python floats, so long recordings stay compact.
"""
import struct
import sys
from array import array
from dataclasses import dataclass
from typing import Iterable, List, Sequence


# Audio format constants
BYTES_PER_SAMPLE = 2
BITS_PER_SAMPLE = 16
WAV_HEADER_SIZE = 44
PCM_FORMAT = 1

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
_BIG_ENDIAN_HOST = sys.byteorder == "big"


@dataclass
class WavHeader:
    """Fields of a canonical 44-byte WAV header."""
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int
    audio_format: int = PCM_FORMAT

    @property
    def duration_ms(self) -> float:
        if not self.byte_rate:
            return 0.0
        return (self.data_size / self.byte_rate) * 1000.0


def interleave(channels: Sequence[Sequence[float]]) -> List[float]:
    """
    Interleave per-channel samples frame by frame (L R L R ...).

    Args:
        channels: One equally long sample sequence per channel

    Returns:
        List[float]: Interleaved samples
    """
    if not channels:
        return []
    if len(channels) == 1:
        return list(channels[0])

    length = min(len(channel) for channel in channels)
    result = []
    for i in range(length):
        for channel in channels:
            result.append(channel[i])
    return result


def float_to_pcm16(sample: float) -> int:
    """Clamp to [-1, 1] and scale asymmetrically to a signed 16-bit value."""
    s = max(-1.0, min(1.0, sample))
    return round(s * 0x8000) if s < 0 else round(s * 0x7FFF)


def floats_to_pcm16(samples: Iterable[float]) -> array:
    """Convert float samples to a signed 16-bit ``array('h')``."""
    return array("h", map(float_to_pcm16, samples))


def float32le_to_samples(raw: bytes) -> array:
    """
    Load interleaved 32-bit float little-endian PCM (ffmpeg ``f32le``).

    Returns:
        array: ``array('f')`` of interleaved samples; a trailing partial sample is dropped
    """
    samples = array("f")
    samples.frombytes(raw[:len(raw) - len(raw) % samples.itemsize])
    if _BIG_ENDIAN_HOST:
        samples.byteswap()
    return samples


def encode_interleaved_wav(samples: Iterable[float], num_channels: int, sample_rate: int) -> bytes:
    """
    Encode interleaved float samples as a 16-bit PCM WAV file.

    Args:
        samples: Interleaved samples in [-1, 1]
        num_channels: Number of interleaved channels
        sample_rate: Sample rate in Hz

    Returns:
        bytes: Complete WAV file
    """
    num_channels = max(num_channels, 1)
    pcm = floats_to_pcm16(samples)
    if _BIG_ENDIAN_HOST:
        pcm.byteswap()

    block_align = num_channels * BYTES_PER_SAMPLE
    byte_rate = sample_rate * block_align
    data_size = len(pcm) * BYTES_PER_SAMPLE

    header = _HEADER.pack(
        b"RIFF", 36 + data_size, b"WAVE",
        b"fmt ", 16, PCM_FORMAT, num_channels, sample_rate, byte_rate, block_align, BITS_PER_SAMPLE,
        b"data", data_size
    )
    return header + pcm.tobytes()


def encode_wav(channels: Sequence[Sequence[float]], sample_rate: int) -> bytes:
    """
    Encode per-channel float samples as a 16-bit PCM WAV file.

    Args:
        channels: Per-channel float samples in [-1, 1]
        sample_rate: Sample rate in Hz

    Returns:
        bytes: Complete WAV file
    """
    return encode_interleaved_wav(interleave(channels), len(channels), sample_rate)


def parse_wav_header(data: bytes) -> WavHeader:
    """
    Parse a canonical 44-byte WAV header.

    Raises:
        ValueError: If the data is not a canonical PCM WAV file
    """
    if len(data) < WAV_HEADER_SIZE:
        raise ValueError(f"WAV data too short: {len(data)} bytes")

    (riff, _riff_size, wave_id, fmt_id, fmt_size, audio_format, num_channels, sample_rate,
     byte_rate, block_align, bits_per_sample, data_id, data_size) = _HEADER.unpack_from(data)

    if riff != b"RIFF" or wave_id != b"WAVE":
        raise ValueError("Not a RIFF/WAVE file")
    if fmt_id != b"fmt " or fmt_size != 16 or data_id != b"data":
        raise ValueError("Unsupported WAV layout, expected fmt chunk of 16 bytes followed by data")

    return WavHeader(
        num_channels=num_channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_size=data_size,
        audio_format=audio_format
    )


def decode_pcm16(data: bytes) -> List[List[float]]:
    """
    Decode a canonical 16-bit WAV file back to per-channel float samples.

    Returns:
        List[List[float]]: One list of samples in [-1, 1] per channel
    """
    header = parse_wav_header(data)
    if header.audio_format != PCM_FORMAT or header.bits_per_sample != BITS_PER_SAMPLE:
        raise ValueError(
            f"Expected 16-bit PCM, got format={header.audio_format} bits={header.bits_per_sample}"
        )

    payload = data[WAV_HEADER_SIZE:WAV_HEADER_SIZE + header.data_size]
    values = array("h")
    values.frombytes(payload[:len(payload) - len(payload) % BYTES_PER_SAMPLE])
    if _BIG_ENDIAN_HOST:
        values.byteswap()

    num_channels = max(header.num_channels, 1)
    return [
        [v / 0x8000 if v < 0 else v / 0x7FFF for v in values[index::num_channels]]
        for index in range(num_channels)
    ]
