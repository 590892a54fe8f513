import math
from dataclasses import dataclass

import numpy as np


class PCMFormatError(ValueError):
    """Raised when a sample request does not fit the audio format or buffer."""


@dataclass(frozen=True)
class AudioFormat:
    sample_rate: float
    channels: int
    bits_per_sample: int
    big_endian: bool = False

    def __post_init__(self):
        if self.channels < 1:
            raise PCMFormatError(f"channel count must be at least 1, got {self.channels}")
        if self.bits_per_sample < 1:
            raise PCMFormatError(f"bits per sample must be at least 1, got {self.bits_per_sample}")
        if self.sample_rate <= 0:
            raise PCMFormatError(f"sample rate must be positive, got {self.sample_rate}")

    @property
    def bytes_per_sample(self) -> int:
        return math.ceil(self.bits_per_sample / 8)

    @property
    def frame_size(self) -> int:
        # bytes for one sample of every channel
        return self.bytes_per_sample * self.channels


class PCMSample:

    @staticmethod
    def decode(data: bytes, offset: int, channel: int, fmt: AudioFormat) -> float:
        """
        Decode one channel's sample at the given frame offset.

        Single byte samples are unsigned (0..255). Wider samples are two's
        complement, with only the low ``bits % 8`` bits of the most
        significant byte belonging to the sample.
        """
        if channel < 0 or channel >= fmt.channels:
            raise PCMFormatError(
                f"channel {channel} out of range for {fmt.channels} channel audio")

        width = fmt.bytes_per_sample
        index = offset * fmt.frame_size + channel * width
        if offset < 0 or index + width > len(data):
            raise PCMFormatError(
                f"sample at frame {offset} (bytes {index}..{index + width}) exceeds buffer of {len(data)} bytes")

        if width == 1:
            return float(data[index])

        raw = data[index:index + width]
        if fmt.big_endian:
            msb = raw[0]
            lower = raw[:0:-1]  # least significant first
        else:
            msb = raw[-1]
            lower = raw[:-1]

        value = 0
        for i, byte in enumerate(lower):
            value |= byte << (8 * i)

        msb_bits = fmt.bits_per_sample % 8 or 8
        msb &= (1 << msb_bits) - 1
        value |= msb << (8 * (width - 1))

        if msb >> (msb_bits - 1):
            value -= 1 << (8 * (width - 1) + msb_bits)
        return float(value)

    @staticmethod
    def encode(value: int, fmt: AudioFormat) -> bytes:
        """Pack a single sample value into raw bytes for ``fmt``."""
        width = fmt.bytes_per_sample
        if width == 1:
            if not 0 <= value <= 255:
                raise PCMFormatError(f"8-bit samples are unsigned, got {value}")
            return bytes([value])

        bits = fmt.bits_per_sample
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        if not low <= value <= high:
            raise PCMFormatError(f"{value} does not fit in {bits} bits")
        return (value & ((1 << bits) - 1)).to_bytes(width, "big" if fmt.big_endian else "little")

    @staticmethod
    def encode_frames(samples, fmt: AudioFormat) -> bytes:
        """Interleave per-channel sample rows (shape frames x channels) into a PCM buffer."""
        samples = np.asarray(samples, dtype=np.int64)
        if samples.ndim == 1:
            samples = samples[:, np.newaxis]
        if samples.shape[1] != fmt.channels:
            raise PCMFormatError(
                f"expected {fmt.channels} channels, got {samples.shape[1]}")
        return b"".join(PCMSample.encode(int(v), fmt) for v in samples.ravel())

    @staticmethod
    def decode_channel(data: bytes, frames: int, channel: int, fmt: AudioFormat) -> np.ndarray:
        out = np.empty(frames, dtype=np.float64)
        for i in range(frames):
            out[i] = PCMSample.decode(data, i, channel, fmt)
        return out
