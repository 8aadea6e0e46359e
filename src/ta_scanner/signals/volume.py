"""Trailing volume average used by the composite score's volume factor."""

from collections.abc import Sequence

DEFAULT_VOLUME_PERIOD = 20


def compute_average_volume(
    volumes: Sequence[float], period: int = DEFAULT_VOLUME_PERIOD
) -> float | None:
    """Mean of the last ``period`` volumes (the current candle included).

    Returns:
        The average, or None when fewer than ``period`` volumes exist, in
        which case the volume factor abstains.
    """
    if period <= 0 or len(volumes) < period:
        return None
    return sum(volumes[-period:]) / period
