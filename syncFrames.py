import argparse
import logging
import sys
from dataclasses import dataclass, field

from frameSpectrum import FrameSpectrum
from syncDetection import SyncDetection
from wav import WavSource

logger = logging.getLogger(__name__)

SYNC_FREQUENCY = 3000       # Hz
SIGNAL_FRAME_LENGTH = 60    # video frames the tone burst lasts
SMOOTHING_WINDOW = 6        # video frames


@dataclass(frozen=True)
class SyncResult:
    magnitudes: tuple
    smoothed: tuple
    frames: dict = field(default_factory=dict)

    def candidates(self) -> list:
        found = set()
        for frames in self.frames.values():
            found |= frames
        return sorted(found)


class SyncFrames:

    @staticmethod
    def detect(smoothed, signal_frame_length: int = SIGNAL_FRAME_LENGTH) -> dict:
        return {
            "averaging_window": SyncDetection.by_averaging_window(smoothed, signal_frame_length),
            "run_length": SyncDetection.by_run_length(smoothed, signal_frame_length),
            "first_near_peak": SyncDetection.by_first_near_peak(smoothed),
        }

    @staticmethod
    def find(stream, fmt, frame_rate: float, frequency: float = SYNC_FREQUENCY,
             signal_frame_length: int = SIGNAL_FRAME_LENGTH,
             smoothing_window: int = SMOOTHING_WINDOW) -> SyncResult:
        """Locate the video frames where the sync tone starts."""
        magnitudes = FrameSpectrum.magnitudes(stream, fmt, frame_rate, frequency)
        smoothed = FrameSpectrum.smooth(magnitudes, smoothing_window)
        frames = SyncFrames.detect(smoothed, signal_frame_length)
        for name, found in frames.items():
            if found:
                logger.info("%s: sync frame %s", name, sorted(found))
            else:
                logger.info("%s: no sync frame detected", name)
        return SyncResult(magnitudes, smoothed, frames)

    @staticmethod
    def find_in_wav(path, frame_rate: float, **kwargs) -> SyncResult:
        with WavSource.open(path) as (fmt, stream):
            return SyncFrames.find(stream, fmt, frame_rate, **kwargs)

    # for debug purpose
    @staticmethod
    def plot(result: SyncResult, title="Sync tone magnitude per video frame"):
        import matplotlib.pyplot as plt
        plt.figure(figsize=(12, 6))
        plt.plot(result.magnitudes, label="Magnitude")
        plt.plot(result.smoothed, label="Smoothed")
        for name, frames in result.frames.items():
            for frame in frames:
                plt.axvline(frame, linestyle="--", label=name)
        plt.title(title)
        plt.xlabel("Video frame")
        plt.ylabel("Magnitude")
        plt.legend()
        plt.show()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Find the video frame of an audio sync tone")
    parser.add_argument("wav", help="PCM wave file extracted from the video")
    parser.add_argument("--fps", type=float, required=True, help="video frame rate")
    parser.add_argument("--frequency", type=float, default=SYNC_FREQUENCY,
                        help=f"sync tone frequency in Hz (default: {SYNC_FREQUENCY})")
    parser.add_argument("--signal-frames", type=int, default=SIGNAL_FRAME_LENGTH,
                        help=f"expected tone length in video frames (default: {SIGNAL_FRAME_LENGTH})")
    parser.add_argument("--window", type=int, default=SMOOTHING_WINDOW,
                        help=f"smoothing window in video frames (default: {SMOOTHING_WINDOW})")
    parser.add_argument("--plot", action="store_true", help="show the magnitude signal")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    result = SyncFrames.find_in_wav(
        args.wav, args.fps,
        frequency=args.frequency,
        signal_frame_length=args.signal_frames,
        smoothing_window=args.window,
    )
    print(f"Analysed {len(result.magnitudes)} video frames")
    for name, frames in result.frames.items():
        print(f"{name}: {sorted(frames) if frames else 'none'}")

    if args.plot:
        SyncFrames.plot(result)
    return 0 if result.candidates() else 1


if __name__ == "__main__":
    sys.exit(main())
