import logging
import wave
from contextlib import contextmanager

import numpy as np
from scipy.io.wavfile import write

from pcmSample import AudioFormat

logger = logging.getLogger(__name__)

sample_rate = 48000
high_amplitude = 32767

sync_frequency = 3000
sync_duration = 2.0


class SyncToneWaves:

    @staticmethod
    def generate(rate: int = sample_rate, frequency: float = sync_frequency,
                 duration: float = sync_duration, lead_in: float = 1.0, tail: float = 1.0,
                 amplitude: int = high_amplitude) -> np.ndarray:
        """Silence, a sine burst at ``frequency`` for ``duration`` seconds, then silence."""
        t = np.linspace(0, duration, int(rate * duration), endpoint=False)
        tone = amplitude * np.sin(2 * np.pi * frequency * t)
        lead = np.zeros(int(rate * lead_in))
        trail = np.zeros(int(rate * tail))
        return np.concatenate([lead, tone, trail]).astype(np.int16)

    @staticmethod
    def write_wav(filename: str, rate: int = sample_rate, **kwargs) -> np.ndarray:
        audio_samples = SyncToneWaves.generate(rate, **kwargs)
        write(filename, rate, audio_samples)
        logger.info("Wrote %.2f s sync tone signal to %s", len(audio_samples) / rate, filename)
        return audio_samples


class _WaveStream:
    """Byte stream over the sample data of an open wave file."""

    def __init__(self, reader: wave.Wave_read):
        self._reader = reader
        self._frame_size = reader.getsampwidth() * reader.getnchannels()

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return self._reader.readframes(self._reader.getnframes())
        return self._reader.readframes(size // self._frame_size)


class WavSource:

    @staticmethod
    @contextmanager
    def open(path):
        """
        Open a PCM wave file as ``(AudioFormat, stream)``.

        Wave data is always little endian and 8-bit wave data is unsigned.
        """
        with wave.open(str(path), "rb") as reader:
            fmt = AudioFormat(
                sample_rate=float(reader.getframerate()),
                channels=reader.getnchannels(),
                bits_per_sample=reader.getsampwidth() * 8,
                big_endian=False,
            )
            logger.debug("Opened %s: %s", path, fmt)
            yield fmt, _WaveStream(reader)


if __name__ == "__main__":
    # demo file with the tone starting one second in
    samples = SyncToneWaves.write_wav("sync_tone.wav")
    print(f"Generated audio duration: {len(samples) / sample_rate:.2f} seconds")
