"""Simple and exponential moving averages over float price series.

The EMA is kept as running state so a full series costs one O(n) pass;
MACD builds on it instead of recomputing history for every point.
"""

from collections.abc import Sequence


def compute_sma(values: Sequence[float], period: int) -> float | None:
    """Arithmetic mean of the last ``period`` values.

    Args:
        values: Price series ordered oldest-first.
        period: Window length.

    Returns:
        The mean, or None when fewer than ``period`` values are available.
    """
    if period <= 0 or len(values) < period:
        return None
    return sum(values[len(values) - period :]) / period


class RunningEMA:
    """Incremental exponential moving average.

    Seeded with the simple average of the first ``period`` values, then
    updated with ``ema = (price - ema) * k + ema`` where ``k = 2 / (period + 1)``.
    """

    def __init__(self, period: int) -> None:
        if period <= 0:
            raise ValueError(f"EMA period must be positive, got {period}")
        self.period = period
        self.multiplier = 2 / (period + 1)
        self._seed: list[float] = []
        self._value: float | None = None

    @property
    def value(self) -> float | None:
        """Current EMA, or None until ``period`` values have been seen."""
        return self._value

    def update(self, price: float) -> float | None:
        """Feed one value and return the EMA after it (None while seeding)."""
        if self._value is None:
            self._seed.append(price)
            if len(self._seed) == self.period:
                self._value = sum(self._seed) / self.period
                self._seed.clear()
            return self._value

        self._value = (price - self._value) * self.multiplier + self._value
        return self._value


def compute_ema_series(values: Sequence[float], period: int) -> list[float]:
    """EMA values aligned to ``values[period - 1:]``.

    Returns an empty list when there are fewer than ``period`` values.
    """
    if period <= 0 or len(values) < period:
        return []

    ema = RunningEMA(period)
    series: list[float] = []
    for price in values:
        current = ema.update(price)
        if current is not None:
            series.append(current)
    return series
