"""Relative Strength Index with Wilder smoothing."""

from collections.abc import Sequence

DEFAULT_RSI_PERIOD = 14


def compute_rsi(values: Sequence[float], period: int = DEFAULT_RSI_PERIOD) -> float | None:
    """Wilder RSI for the most recent point of a price series.

    Average gain/loss are seeded from the first ``period`` deltas and then
    smoothed forward to the end of the series with
    ``avg = (avg * (period - 1) + current) / period``.

    Args:
        values: Close prices ordered oldest-first.
        period: Smoothing window.

    Returns:
        RSI in [0, 100]; exactly 100.0 when the smoothed average loss is 0.
        None when ``len(values) < period + 1``.
    """
    if period <= 0 or len(values) < period + 1:
        return None

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = values[i] - values[i - 1]
        if change >= 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period

    for i in range(period + 1, len(values)):
        change = values[i] - values[i - 1]
        current_gain = change if change > 0 else 0.0
        current_loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + current_gain) / period
        avg_loss = (avg_loss * (period - 1) + current_loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    rsi = 100 - (100 / (1 + rs))
    return min(max(rsi, 0.0), 100.0)
