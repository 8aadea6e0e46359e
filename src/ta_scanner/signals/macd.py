"""Moving Average Convergence Divergence.

Single-pass evaluation: fast and slow EMAs run side by side, every MACD
line value feeds the signal-line EMA as soon as the slow EMA is seeded.
Only the last reading is returned.
"""

from collections.abc import Sequence

from ta_scanner.signals.models import MACDResult
from ta_scanner.signals.moving_average import RunningEMA

DEFAULT_FAST_PERIOD = 12
DEFAULT_SLOW_PERIOD = 26
DEFAULT_SIGNAL_PERIOD = 9


def compute_macd(
    values: Sequence[float],
    fast: int = DEFAULT_FAST_PERIOD,
    slow: int = DEFAULT_SLOW_PERIOD,
    signal_period: int = DEFAULT_SIGNAL_PERIOD,
) -> MACDResult | None:
    """Compute the last MACD line, signal line and histogram values.

    MACD line = EMA(fast) - EMA(slow), defined from the point the slow EMA
    is seeded. Signal line = EMA(signal_period) of the MACD-line series.
    Histogram = MACD - signal.

    Args:
        values: Close prices ordered oldest-first.
        fast: Fast EMA period.
        slow: Slow EMA period.
        signal_period: Signal-line EMA period.

    Returns:
        MACDResult for the last point, or None when
        ``len(values) < slow + signal_period``.
    """
    if len(values) < slow + signal_period:
        return None

    fast_ema = RunningEMA(fast)
    slow_ema = RunningEMA(slow)
    signal_ema = RunningEMA(signal_period)

    macd_line: float | None = None
    signal_line: float | None = None

    for price in values:
        fast_value = fast_ema.update(price)
        slow_value = slow_ema.update(price)
        if fast_value is None or slow_value is None:
            continue
        macd_line = fast_value - slow_value
        signal_line = signal_ema.update(macd_line)

    if macd_line is None or signal_line is None:
        return None

    return MACDResult(
        macd=macd_line,
        signal=signal_line,
        histogram=macd_line - signal_line,
    )
