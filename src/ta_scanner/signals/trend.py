"""Trend classification from SMA, RSI and MACD readings.

Each classifier maps an indicator value to a Trend. A None indicator
(insufficient history) yields a None trend so the factor abstains
downstream instead of reading as neutral.
"""

from ta_scanner.signals.models import MACDResult, MacdSignal, Trend

#: RSI level above which a market is overbought.
RSI_OVERBOUGHT = 70.0
#: RSI level below which a market is oversold.
RSI_OVERSOLD = 30.0
#: RSI midline separating bullish from bearish momentum.
RSI_MIDLINE = 50.0


def classify_sma_trend(
    short_sma: float | None, long_sma: float | None
) -> tuple[Trend | None, float | None]:
    """Classify the short/long SMA relationship and its percentage spread.

    Strength is ``(short / long - 1) * 100`` for a bullish trend and
    ``(long / short - 1) * 100`` for a bearish one, so it is always >= 0.

    Args:
        short_sma: Fast moving average.
        long_sma: Slow moving average.

    Returns:
        (trend, strength). (None, None) when either SMA is unavailable.
        Non-positive averages cannot form a ratio and read as neutral.
    """
    if short_sma is None or long_sma is None:
        return None, None

    if short_sma <= 0 or long_sma <= 0:
        return Trend.NEUTRAL, 0.0

    if short_sma > long_sma:
        return Trend.BULLISH, (short_sma / long_sma - 1) * 100
    if short_sma < long_sma:
        return Trend.BEARISH, (long_sma / short_sma - 1) * 100
    return Trend.NEUTRAL, 0.0


def classify_rsi_trend(rsi: float | None) -> Trend | None:
    """Map an RSI value onto overbought/oversold/bullish/bearish/neutral."""
    if rsi is None:
        return None
    if rsi > RSI_OVERBOUGHT:
        return Trend.OVERBOUGHT
    if rsi < RSI_OVERSOLD:
        return Trend.OVERSOLD
    if rsi > RSI_MIDLINE:
        return Trend.BULLISH
    if rsi < RSI_MIDLINE:
        return Trend.BEARISH
    return Trend.NEUTRAL


def classify_macd(macd: MACDResult | None) -> tuple[Trend | None, MacdSignal]:
    """Derive MACD trend and directional sub-signal.

    The trend follows the MACD line against its signal line. A plain
    buy/sell needs the histogram to agree with the trend; when line,
    signal and histogram share a sign the sub-signal is upgraded to
    strong_buy/strong_sell.

    Args:
        macd: Last MACD reading, or None.

    Returns:
        (trend, sub_signal). (None, MacdSignal.NONE) without a reading.
    """
    if macd is None:
        return None, MacdSignal.NONE

    trend = Trend.NEUTRAL
    sub_signal = MacdSignal.NONE

    if macd.macd > macd.signal:
        trend = Trend.BULLISH
        if macd.histogram > 0:
            sub_signal = MacdSignal.BUY
    elif macd.macd < macd.signal:
        trend = Trend.BEARISH
        if macd.histogram < 0:
            sub_signal = MacdSignal.SELL

    if macd.macd > 0 and macd.signal > 0 and macd.histogram > 0:
        sub_signal = MacdSignal.STRONG_BUY
    elif macd.macd < 0 and macd.signal < 0 and macd.histogram < 0:
        sub_signal = MacdSignal.STRONG_SELL

    return trend, sub_signal
