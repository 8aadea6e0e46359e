"""Liquidity filter that selects the scan universe from a ticker snapshot."""

from collections.abc import Mapping

from ta_scanner.exchange.types import Ticker
from ta_scanner.market_data.models import LiquidPair


def select_liquid_pairs(
    tickers: Mapping[str, Ticker],
    markets: Mapping[str, dict],
    min_quote_volume: float,
    max_pairs: int,
) -> list[LiquidPair]:
    """Pick the most liquid tradable symbols.

    A symbol qualifies when it is a known market that is not a darkpool
    and its 24h quote volume is at least ``min_quote_volume``. Survivors
    are sorted by quote volume descending (stable for ties, in ticker
    order) and truncated to ``max_pairs``.

    Args:
        tickers: symbol -> Ticker snapshot from the provider.
        markets: ccxt-style markets dict.
        min_quote_volume: Minimum 24h quote volume.
        max_pairs: Maximum number of symbols to keep.

    Returns:
        Volume-ranked LiquidPair list. This order is the scan order.
    """
    pairs: list[LiquidPair] = []
    for symbol, ticker in tickers.items():
        market = markets.get(symbol)
        if not market or market.get("darkpool"):
            continue
        quote_volume = ticker.quote_volume
        if not quote_volume or quote_volume < min_quote_volume:
            continue
        pairs.append(
            LiquidPair(
                symbol=symbol,
                quote_volume=quote_volume,
                price=ticker.last,
                change_24h=ticker.percentage,
            )
        )

    pairs.sort(key=lambda p: p.quote_volume, reverse=True)
    return pairs[: max(max_pairs, 0)]
