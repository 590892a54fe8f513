import pytest

from syncDetection import SyncDetection


def run_signal(start, length, total=40, high=10.0, low=1.0):
    values = [low] * total
    for i in range(start, start + length):
        values[i] = high
    return values


class TestAveragingWindow:

    def test_highest_mean_window(self):
        values = [1, 1, 1, 5, 5, 5, 1, 1, 1]
        assert SyncDetection.by_averaging_window(values, 3) == {3}

    def test_equal_means_prefer_earliest(self):
        values = [2, 2, 0, 2, 2, 0, 0]
        assert SyncDetection.by_averaging_window(values, 2) == {0}

    def test_too_short(self):
        assert SyncDetection.by_averaging_window([1.0, 2.0], 3) == frozenset()
        assert SyncDetection.by_averaging_window([], 1) == frozenset()

    def test_length_equal_to_window(self):
        assert SyncDetection.by_averaging_window([1.0, 2.0, 3.0], 3) == {0}

    def test_last_start_not_considered(self):
        # the window starting at n - L is outside the search range
        values = [1, 1, 1, 1, 9, 9]
        assert SyncDetection.by_averaging_window(values, 2) == {3}

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            SyncDetection.by_averaging_window([1.0], 0)


class TestRunLength:

    def test_run_inside_band(self):
        values = run_signal(10, 15)
        values[17] = 8.0
        assert SyncDetection.by_run_length(values, 20) == {10}

    def test_run_outside_band(self):
        values = run_signal(10, 15)
        assert SyncDetection.by_run_length(values, 5) == frozenset()

    def test_only_longest_run_checked(self):
        # a 3 frame run fits (1, 6) but the 15 frame run does not
        values = run_signal(20, 15)
        for i in range(2, 5):
            values[i] = 9.0
        assert SyncDetection.by_run_length(values, 5) == frozenset()

    def test_equal_runs_prefer_earliest(self):
        values = run_signal(5, 4)
        for i in range(20, 24):
            values[i] = 10.0
        assert SyncDetection.by_run_length(values, 4) == {5}

    def test_longer_later_run_wins(self):
        values = run_signal(5, 3)
        for i in range(20, 26):
            values[i] = 10.0
        assert SyncDetection.by_run_length(values, 6) == {20}

    def test_run_reaching_end(self):
        values = run_signal(34, 6)
        assert SyncDetection.by_run_length(values, 6) == {34}

    def test_empty_and_silent(self):
        assert SyncDetection.by_run_length([], 20) == frozenset()
        assert SyncDetection.by_run_length([0.0] * 30, 20) == frozenset()

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            SyncDetection.by_run_length([1.0], 0)


class TestFirstNearPeak:

    def test_first_within_ten_percent(self):
        assert SyncDetection.by_first_near_peak([1, 2, 9, 10, 3]) == {2}

    def test_peak_itself(self):
        assert SyncDetection.by_first_near_peak([1, 2, 8.9, 10, 3]) == {3}

    def test_degenerate_signals(self):
        assert SyncDetection.by_first_near_peak([]) == {0}
        assert SyncDetection.by_first_near_peak([0.0, 0.0, 0.0]) == {0}
