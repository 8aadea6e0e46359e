"""Market data type definitions and ccxt payload parsing.

Prices and volumes are floats, exactly as ccxt delivers them.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Candle:
    """A single OHLCV candle. Immutable once produced by the provider."""

    timestamp: int  # Unix milliseconds
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class Ticker:
    """24h ticker snapshot for a single symbol.

    Any field may be None when the exchange does not report it.
    """

    symbol: str
    last: float | None = None
    bid: float | None = None
    ask: float | None = None
    high: float | None = None
    low: float | None = None
    volume: float | None = None  # base volume
    quote_volume: float | None = None
    percentage: float | None = None  # 24h change, percent
    timestamp: int | None = None


def _to_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def parse_ohlcv(rows: list[list]) -> list[Candle]:
    """Convert ccxt OHLCV rows ``[ts, open, high, low, close, volume]`` to Candles.

    Row order is preserved. Rows without a close price are dropped;
    a missing volume is read as 0.

    Args:
        rows: Raw rows from ``fetch_ohlcv``.

    Returns:
        List of Candle objects, oldest first.
    """
    candles: list[Candle] = []
    for row in rows:
        if len(row) < 6 or row[4] is None:
            continue
        candles.append(
            Candle(
                timestamp=int(row[0]),
                open=float(row[1]) if row[1] is not None else float(row[4]),
                high=float(row[2]) if row[2] is not None else float(row[4]),
                low=float(row[3]) if row[3] is not None else float(row[4]),
                close=float(row[4]),
                volume=float(row[5]) if row[5] is not None else 0.0,
            )
        )
    return candles


def parse_ticker(symbol: str, raw: dict) -> Ticker:
    """Build a Ticker from a ccxt unified ticker dict."""
    timestamp = raw.get("timestamp")
    return Ticker(
        symbol=raw.get("symbol") or symbol,
        last=_to_float(raw.get("last")),
        bid=_to_float(raw.get("bid")),
        ask=_to_float(raw.get("ask")),
        high=_to_float(raw.get("high")),
        low=_to_float(raw.get("low")),
        volume=_to_float(raw.get("baseVolume")),
        quote_volume=_to_float(raw.get("quoteVolume")),
        percentage=_to_float(raw.get("percentage")),
        timestamp=int(timestamp) if timestamp is not None else None,
    )
