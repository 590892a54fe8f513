import logging
import math

import numpy as np

from pcmSample import AudioFormat, PCMSample

logger = logging.getLogger(__name__)

# only the start of a recording is searched for the sync tone
ANALYSIS_SECONDS = 30


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class FrameSpectrum:

    @staticmethod
    def samples_per_video_frame(sample_rate: float, frame_rate: float) -> int:
        if frame_rate <= 0:
            raise ValueError(f"frame rate must be positive, got {frame_rate}")
        spvf = round_half_up(sample_rate / frame_rate)
        if spvf < 1:
            raise ValueError(
                f"sample rate {sample_rate} gives no audio samples per video frame at {frame_rate} fps")
        return spvf

    @staticmethod
    def target_bin(frequency: float, sample_rate: float, samples_per_frame: int) -> int:
        """
        Index into the interleaved re/im spectrum for ``frequency``.

        The offset counts from the top of the full (two sided) spectrum, so
        it is not the usual ``frequency / bin_width``.
        """
        bin_width = sample_rate / samples_per_frame
        target = samples_per_frame - round_half_up(frequency / bin_width + 1)
        # target and target + 1 are read from a 2 * samples_per_frame buffer
        if target < 0 or target + 1 >= 2 * samples_per_frame:
            raise ValueError(
                f"{frequency} Hz is outside the spectrum of a {samples_per_frame} sample frame at {sample_rate} Hz")
        return target

    @staticmethod
    def frame_limit(frame_rate: float) -> int:
        return round_half_up(frame_rate * ANALYSIS_SECONDS)

    @staticmethod
    def _read_chunk(stream, size: int) -> bytes:
        # file objects and pipes may return short reads before EOF
        parts = []
        remaining = size
        while remaining > 0:
            data = stream.read(remaining)
            if not data:
                break
            parts.append(data)
            remaining -= len(data)
        return b"".join(parts)

    @staticmethod
    def bin_magnitude(samples: np.ndarray, target_bin: int) -> float:
        spectrum = np.fft.fft(samples)
        packed = np.empty(2 * len(spectrum), dtype=np.float64)
        packed[0::2] = spectrum.real
        packed[1::2] = spectrum.imag
        return float(math.hypot(packed[target_bin], packed[target_bin + 1]))

    @staticmethod
    def magnitudes(stream, fmt: AudioFormat, frame_rate: float, frequency: float, channel: int = 0) -> tuple:
        """
        Magnitude of ``frequency`` for each video frame of audio in ``stream``.

        The stream is read sequentially in chunks of one video frame of audio.
        A trailing partial chunk is dropped and at most ``frame_limit`` values
        are produced.
        """
        spvf = FrameSpectrum.samples_per_video_frame(fmt.sample_rate, frame_rate)
        target = FrameSpectrum.target_bin(frequency, fmt.sample_rate, spvf)
        limit = FrameSpectrum.frame_limit(frame_rate)
        chunk_bytes = spvf * fmt.frame_size

        logger.debug("Analysing %s Hz: %d samples per video frame, bin %d, limit %d frames",
                     frequency, spvf, target, limit)

        values = []
        while len(values) < limit:
            chunk = FrameSpectrum._read_chunk(stream, chunk_bytes)
            if len(chunk) < chunk_bytes:
                break
            samples = PCMSample.decode_channel(chunk, spvf, channel, fmt)
            values.append(FrameSpectrum.bin_magnitude(samples, target))

        logger.debug("Analysed %d video frames of audio", len(values))
        return tuple(values)

    @staticmethod
    def smooth(values, window: int) -> tuple:
        """Forward moving average whose window shrinks over the last values."""
        if window < 1:
            raise ValueError(f"averaging window must be at least 1, got {window}")
        data = np.asarray(values, dtype=np.float64)
        averaged = []
        for i in range(len(data)):
            averaged.append(float(np.mean(data[i:i + window])))
        return tuple(averaged)
