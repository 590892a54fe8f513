import logging

from frameSpectrum import round_half_up

logger = logging.getLogger(__name__)

RUN_LENGTH_THRESHOLD = 0.8
RUN_LENGTH_BAND = (0.25, 1.25)
FIRST_NEAR_PEAK_THRESHOLD = 0.9


def _check_signal_length(signal_frame_length: int):
    if signal_frame_length < 1:
        raise ValueError(f"signal frame length must be at least 1, got {signal_frame_length}")


def _peak(values) -> float:
    peak = 0.0
    for value in values:
        if value > peak:
            peak = value
    return peak


class SyncDetection:
    """Candidate sync frames from a smoothed per-frame magnitude signal."""

    @staticmethod
    def by_averaging_window(values, signal_frame_length: int) -> frozenset:
        """
        Start of the window of ``signal_frame_length`` frames with the highest mean.

        Returns an empty set when there are fewer values than the window.
        Equal means keep the earliest start.
        """
        _check_signal_length(signal_frame_length)
        n = len(values)
        if n < signal_frame_length:
            return frozenset()

        # the final start position is not considered unless it is the only one
        last_start = max(n - signal_frame_length, 1)

        best_start = 0
        best_average = None
        for start in range(last_start):
            average = 0.0
            for offset in range(signal_frame_length):
                average += values[start + offset] / signal_frame_length
            if best_average is None or average > best_average:
                best_average = average
                best_start = start

        logger.debug("Averaging window: best start %d (mean %s)", best_start, best_average)
        return frozenset({best_start})

    @staticmethod
    def by_run_length(values, signal_frame_length: int) -> frozenset:
        """
        Start of the longest run of values within 20% of the peak.

        The run is only accepted if its length lies strictly between 25% and
        125% of ``signal_frame_length``. Anything else gives an empty set.
        """
        _check_signal_length(signal_frame_length)
        peak = _peak(values)
        if peak <= 0:
            return frozenset()

        target = RUN_LENGTH_THRESHOLD * peak
        min_run = round_half_up(signal_frame_length * RUN_LENGTH_BAND[0])
        max_run = round_half_up(signal_frame_length * RUN_LENGTH_BAND[1])

        n = len(values)
        longest_run = 0
        longest_start = -1
        start = 0
        while start < n:
            if values[start] >= target:
                run = 1
                while start + run < n and values[start + run] >= target:
                    run += 1
                if run > longest_run:
                    longest_run = run
                    longest_start = start
                # the value after the run is below target
                start += run + 1
            else:
                start += 1

        logger.debug("Run length: longest run %d at %d, accepted range (%d, %d)",
                     longest_run, longest_start, min_run, max_run)
        if min_run < longest_run < max_run:
            return frozenset({longest_start})
        return frozenset()

    @staticmethod
    def by_first_near_peak(values) -> frozenset:
        """First frame within 10% of the peak value."""
        target = FIRST_NEAR_PEAK_THRESHOLD * _peak(values)
        for index, value in enumerate(values):
            if value >= target:
                return frozenset({index})
        # only reached for an empty signal
        return frozenset({0})
