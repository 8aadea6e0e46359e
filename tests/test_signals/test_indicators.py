"""Tests for the indicator library: SMA, EMA, RSI, MACD and average volume.

Insufficient history must always produce None, never an exception or a
value computed from out-of-range indices.
"""

import math

import pytest

from ta_scanner.signals.macd import compute_macd
from ta_scanner.signals.models import MACDResult
from ta_scanner.signals.moving_average import RunningEMA, compute_ema_series, compute_sma
from ta_scanner.signals.rsi import compute_rsi
from ta_scanner.signals.volume import compute_average_volume

RISE_THEN_FALL = [10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 19, 18, 17, 16, 15, 14, 13, 12, 11]


class TestComputeSma:
    """Tests for the simple moving average."""

    def test_mean_of_last_period_values(self) -> None:
        assert compute_sma([1.0, 2.0, 3.0, 4.0, 5.0], 3) == 4.0

    def test_sliding_window_example(self) -> None:
        """Short and long SMAs over the rise-then-fall series."""
        assert compute_sma(RISE_THEN_FALL, 5) == (15 + 14 + 13 + 12 + 11) / 5
        assert compute_sma(RISE_THEN_FALL, 10) == sum(RISE_THEN_FALL[-10:]) / 10
        assert compute_sma(RISE_THEN_FALL, 10) == 15.5

    def test_exact_length_is_enough(self) -> None:
        assert compute_sma([2.0, 4.0], 2) == 3.0

    @pytest.mark.parametrize("length", [0, 1, 4])
    def test_insufficient_data_returns_none(self, length: int) -> None:
        assert compute_sma([1.0] * length, 5) is None

    def test_non_positive_period_returns_none(self) -> None:
        assert compute_sma([1.0, 2.0], 0) is None

    def test_input_not_mutated(self) -> None:
        values = [1.0, 2.0, 3.0]
        compute_sma(values, 2)
        assert values == [1.0, 2.0, 3.0]


class TestRunningEma:
    """Tests for the incremental EMA state."""

    def test_none_until_seeded(self) -> None:
        ema = RunningEMA(3)
        assert ema.update(1.0) is None
        assert ema.update(2.0) is None
        assert ema.value is None

    def test_seed_is_simple_average(self) -> None:
        ema = RunningEMA(3)
        for v in (1.0, 2.0):
            ema.update(v)
        assert ema.update(3.0) == 2.0

    def test_known_values_period_3(self) -> None:
        """k = 2 / (3 + 1) = 0.5.

        seed = (1 + 2 + 3) / 3 = 2
        ema  = (4 - 2) * 0.5 + 2 = 3
        ema  = (5 - 3) * 0.5 + 3 = 4
        """
        assert compute_ema_series([1.0, 2.0, 3.0, 4.0, 5.0], 3) == [2.0, 3.0, 4.0]

    def test_series_aligned_to_period_minus_one(self) -> None:
        values = [float(i) for i in range(20)]
        assert len(compute_ema_series(values, 6)) == 20 - 6 + 1

    def test_series_empty_when_insufficient(self) -> None:
        assert compute_ema_series([1.0, 2.0], 3) == []

    def test_constant_series_stays_constant(self) -> None:
        assert compute_ema_series([7.0] * 10, 4) == [7.0] * 7

    def test_invalid_period_rejected(self) -> None:
        with pytest.raises(ValueError):
            RunningEMA(0)


class TestComputeRsi:
    """Tests for Wilder RSI."""

    def test_needs_period_plus_one_values(self) -> None:
        assert compute_rsi([float(i) for i in range(14)]) is None
        assert compute_rsi([float(i) for i in range(15)]) is not None

    def test_empty_input_returns_none(self) -> None:
        assert compute_rsi([]) is None

    def test_only_gains_is_exactly_100(self) -> None:
        assert compute_rsi([float(i) for i in range(30)]) == 100.0

    def test_flat_series_is_exactly_100(self) -> None:
        """No losses means avg_loss == 0, which reads as 100."""
        assert compute_rsi([5.0] * 20) == 100.0

    def test_only_losses_is_zero(self) -> None:
        assert compute_rsi([float(30 - i) for i in range(30)]) == 0.0

    def test_seed_average(self) -> None:
        """Deltas +1, -1 with period 2 -> avg gain = avg loss -> RSI 50."""
        assert compute_rsi([1.0, 2.0, 1.0], period=2) == 50.0

    def test_wilder_smoothing(self) -> None:
        """Seed gain 0.5 / loss 0.5, then +1:
        gain = (0.5 * 1 + 1) / 2 = 0.75, loss = (0.5 * 1 + 0) / 2 = 0.25
        RS = 3 -> RSI = 100 - 100 / 4 = 75
        """
        assert compute_rsi([1.0, 2.0, 1.0, 2.0], period=2) == 75.0

    def test_always_within_bounds(self) -> None:
        values = [100 + 10 * math.sin(i / 3) + (i % 7) for i in range(80)]
        for end in range(15, len(values) + 1):
            rsi = compute_rsi(values[:end])
            assert rsi is not None
            assert 0.0 <= rsi <= 100.0


class TestComputeMacd:
    """Tests for MACD with incremental EMA state."""

    def test_needs_slow_plus_signal_values(self) -> None:
        assert compute_macd([100.0] * 34) is None
        assert compute_macd([100.0] * 35) is not None

    def test_constant_series_is_zero(self) -> None:
        assert compute_macd([100.0] * 60) == MACDResult(macd=0.0, signal=0.0, histogram=0.0)

    def test_linear_trend_converges_to_lag_difference(self) -> None:
        """For a linear series the SMA-seeded EMA lags by (period - 1) / 2 steps,
        so MACD = (12.5 - 5.5) * slope and the histogram is ~0."""
        values = [100.0 + i for i in range(80)]
        result = compute_macd(values)
        assert result is not None
        assert result.macd == pytest.approx(7.0)
        assert result.signal == pytest.approx(7.0)
        assert result.histogram == pytest.approx(0.0, abs=1e-9)

    def test_histogram_is_macd_minus_signal(self) -> None:
        values = [100 + 5 * math.sin(i / 4) for i in range(60)]
        result = compute_macd(values)
        assert result is not None
        assert result.histogram == result.macd - result.signal

    def test_matches_full_series_computation(self) -> None:
        """MACD line[i] = fast[i + (slow - fast)] - slow[i]; signal = EMA9 of the line."""
        values = [100 + 5 * math.sin(i / 4) + i * 0.3 for i in range(70)]
        fast = compute_ema_series(values, 12)
        slow = compute_ema_series(values, 26)
        line = [fast[i + 14] - slow[i] for i in range(len(slow))]
        signal = compute_ema_series(line, 9)

        result = compute_macd(values)
        assert result is not None
        assert result.macd == pytest.approx(line[-1])
        assert result.signal == pytest.approx(signal[-1])

    def test_custom_periods(self) -> None:
        assert compute_macd([1.0] * 9, fast=3, slow=6, signal_period=3) is not None
        assert compute_macd([1.0] * 8, fast=3, slow=6, signal_period=3) is None


class TestComputeAverageVolume:
    """Tests for the trailing volume average."""

    def test_average_of_last_period(self) -> None:
        volumes = [1.0] * 5 + [2.0] * 20
        assert compute_average_volume(volumes) == 2.0

    def test_insufficient_returns_none(self) -> None:
        assert compute_average_volume([1.0] * 19) is None

    def test_custom_period(self) -> None:
        assert compute_average_volume([1.0, 2.0, 3.0], period=2) == 2.5
