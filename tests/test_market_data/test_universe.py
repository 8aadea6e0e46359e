"""Tests for the liquidity filter that builds the scan universe."""

from ta_scanner.exchange.types import Ticker
from ta_scanner.market_data.universe import select_liquid_pairs


# ---------------------------------------------------------------------------
# Sample snapshot (mimics a spot exchange with a darkpool and a delisted pair)
# ---------------------------------------------------------------------------

MARKETS = {
    "BTC/USDT": {"symbol": "BTC/USDT"},
    "ETH/USDT": {"symbol": "ETH/USDT"},
    "SOL/USDT": {"symbol": "SOL/USDT"},
    "DOGE/USDT": {"symbol": "DOGE/USDT"},
    "XBT/USD.d": {"symbol": "XBT/USD.d", "darkpool": True},
}

TICKERS = {
    "SOL/USDT": Ticker(symbol="SOL/USDT", last=150.0, quote_volume=3_000_000.0, percentage=2.0),
    "BTC/USDT": Ticker(symbol="BTC/USDT", last=60_000.0, quote_volume=9_000_000.0, percentage=1.0),
    "DOGE/USDT": Ticker(symbol="DOGE/USDT", last=0.1, quote_volume=500_000.0),
    "ETH/USDT": Ticker(symbol="ETH/USDT", last=3_000.0, quote_volume=3_000_000.0),
    "XBT/USD.d": Ticker(symbol="XBT/USD.d", last=60_000.0, quote_volume=50_000_000.0),
    "OLD/USDT": Ticker(symbol="OLD/USDT", last=1.0, quote_volume=20_000_000.0),
}


class TestSelectLiquidPairs:
    """Tests for select_liquid_pairs."""

    def test_filters_and_sorts_by_volume(self) -> None:
        pairs = select_liquid_pairs(TICKERS, MARKETS, 1_000_000.0, 50)
        assert [p.symbol for p in pairs] == ["BTC/USDT", "SOL/USDT", "ETH/USDT"]

    def test_ties_keep_ticker_order(self) -> None:
        """SOL precedes ETH in the snapshot and both trade 3M."""
        pairs = select_liquid_pairs(TICKERS, MARKETS, 1_000_000.0, 50)
        assert pairs[1].symbol == "SOL/USDT"
        assert pairs[2].symbol == "ETH/USDT"

    def test_excludes_darkpool_and_unknown_markets(self) -> None:
        symbols = {p.symbol for p in select_liquid_pairs(TICKERS, MARKETS, 0.0, 50)}
        assert "XBT/USD.d" not in symbols
        assert "OLD/USDT" not in symbols

    def test_minimum_volume_is_inclusive(self) -> None:
        pairs = select_liquid_pairs(TICKERS, MARKETS, 3_000_000.0, 50)
        assert [p.symbol for p in pairs] == ["BTC/USDT", "SOL/USDT", "ETH/USDT"]

    def test_missing_volume_excluded(self) -> None:
        tickers = {"BTC/USDT": Ticker(symbol="BTC/USDT", last=1.0, quote_volume=None)}
        assert select_liquid_pairs(tickers, MARKETS, 0.0, 50) == []

    def test_truncates_to_max_pairs(self) -> None:
        pairs = select_liquid_pairs(TICKERS, MARKETS, 0.0, 2)
        assert [p.symbol for p in pairs] == ["BTC/USDT", "SOL/USDT"]

    def test_zero_max_pairs(self) -> None:
        assert select_liquid_pairs(TICKERS, MARKETS, 0.0, 0) == []

    def test_carries_ticker_snapshot(self) -> None:
        btc = select_liquid_pairs(TICKERS, MARKETS, 0.0, 1)[0]
        assert btc.price == 60_000.0
        assert btc.quote_volume == 9_000_000.0
        assert btc.change_24h == 1.0

    def test_empty_snapshot(self) -> None:
        assert select_liquid_pairs({}, MARKETS, 0.0, 50) == []
