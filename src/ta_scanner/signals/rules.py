"""Discrete signal emission rules.

Signals are emitted in a fixed order (SMA, RSI, MACD). Consumers that
pick "the strongest" signal rely on that order to break ties.
"""

from collections.abc import Sequence
from enum import Enum

from ta_scanner.signals.models import (
    MacdSignal,
    Signal,
    SignalAction,
    SignalSource,
    SignalType,
    Trend,
)

#: Minimum SMA spread (percent) before a cross signal is emitted.
SMA_MIN_STRENGTH = 1.0
RSI_SIGNAL_STRENGTH = 80.0
MACD_SIGNAL_STRENGTH = 70.0
MACD_STRONG_SIGNAL_STRENGTH = 90.0


class SmaStrengthMode(str, Enum):
    """How the raw SMA spread is normalized into a signal strength."""

    DIVIDE = "divide"
    MULTIPLY = "multiply"


def sma_signal_strength(sma_strength: float, mode: SmaStrengthMode, factor: float = 5) -> float:
    """Normalize an SMA spread into a 0-100 signal strength."""
    if mode is SmaStrengthMode.MULTIPLY:
        return min(sma_strength * factor, 100.0)
    return min(sma_strength / factor, 100.0)


def build_signals(
    *,
    sma_trend: Trend | None,
    sma_strength: float | None,
    rsi_trend: Trend | None,
    rsi: float | None,
    macd_signal: MacdSignal,
    short_period: int,
    long_period: int,
    strength_mode: SmaStrengthMode = SmaStrengthMode.DIVIDE,
    strength_factor: float = 5,
) -> list[Signal]:
    """Emit the typed signals implied by a set of trend classifications.

    Args:
        sma_trend: SMA trend, None when the SMAs were unavailable.
        sma_strength: SMA spread in percent.
        rsi_trend: RSI classification.
        rsi: Raw RSI value, used in descriptions.
        macd_signal: MACD sub-signal.
        short_period: Fast SMA period, used in descriptions.
        long_period: Slow SMA period, used in descriptions.
        strength_mode: SMA strength normalization.
        strength_factor: Divisor or multiplier for ``strength_mode``.

    Returns:
        Signals in SMA, RSI, MACD order. Possibly empty.
    """
    signals: list[Signal] = []

    if sma_strength is not None and sma_strength > SMA_MIN_STRENGTH:
        strength = sma_signal_strength(sma_strength, strength_mode, strength_factor)
        if sma_trend is Trend.BULLISH:
            signals.append(
                Signal(
                    type=SignalType.SMA_GOLDEN_CROSS,
                    action=SignalAction.BUY,
                    strength=strength,
                    description=(
                        f"Golden cross: fast SMA ({short_period}) crossed above "
                        f"slow SMA ({long_period})"
                    ),
                    source=SignalSource.SMA,
                )
            )
        elif sma_trend is Trend.BEARISH:
            signals.append(
                Signal(
                    type=SignalType.SMA_DEATH_CROSS,
                    action=SignalAction.SELL,
                    strength=strength,
                    description=(
                        f"Death cross: fast SMA ({short_period}) crossed below "
                        f"slow SMA ({long_period})"
                    ),
                    source=SignalSource.SMA,
                )
            )

    if rsi_trend is Trend.OVERSOLD:
        signals.append(
            Signal(
                type=SignalType.RSI_OVERSOLD,
                action=SignalAction.BUY,
                strength=RSI_SIGNAL_STRENGTH,
                description=f"RSI oversold ({rsi:.2f}), potential reversal up",
                source=SignalSource.RSI,
            )
        )
    elif rsi_trend is Trend.OVERBOUGHT:
        signals.append(
            Signal(
                type=SignalType.RSI_OVERBOUGHT,
                action=SignalAction.SELL,
                strength=RSI_SIGNAL_STRENGTH,
                description=f"RSI overbought ({rsi:.2f}), potential reversal down",
                source=SignalSource.RSI,
            )
        )

    if macd_signal in (MacdSignal.BUY, MacdSignal.STRONG_BUY):
        strong = macd_signal is MacdSignal.STRONG_BUY
        signals.append(
            Signal(
                type=SignalType.MACD_CROSSOVER,
                action=SignalAction.BUY,
                strength=MACD_STRONG_SIGNAL_STRENGTH if strong else MACD_SIGNAL_STRENGTH,
                description=(
                    "Strong bullish MACD: line above signal in positive territory"
                    if strong
                    else "Bullish MACD: line crossed above signal"
                ),
                source=SignalSource.MACD,
            )
        )
    elif macd_signal in (MacdSignal.SELL, MacdSignal.STRONG_SELL):
        strong = macd_signal is MacdSignal.STRONG_SELL
        signals.append(
            Signal(
                type=SignalType.MACD_CROSSOVER,
                action=SignalAction.SELL,
                strength=MACD_STRONG_SIGNAL_STRENGTH if strong else MACD_SIGNAL_STRENGTH,
                description=(
                    "Strong bearish MACD: line below signal in negative territory"
                    if strong
                    else "Bearish MACD: line crossed below signal"
                ),
                source=SignalSource.MACD,
            )
        )

    return signals


def pick_strongest_signal(signals: Sequence[Signal]) -> Signal | None:
    """Return the first signal with the maximum strength, or None."""
    return max(signals, key=lambda s: s.strength, default=None)
