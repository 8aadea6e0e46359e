"""Price-level and signal-strength alerts.

Price alerts fire once when the price crosses a level and re-arm only
after the price moves back across it. Signal alerts fire for every
signal at or above the configured strength.
"""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

from ta_scanner.config import AlertSettings
from ta_scanner.logging import get_logger
from ta_scanner.market_data.models import Alert, AlertKind
from ta_scanner.signals.models import Signal, SignalAction

logger = get_logger(__name__)


@dataclass
class _PriceLatch:
    above: bool = False
    below: bool = False


class AlertMonitor:
    """Evaluates alert conditions and keeps a bounded alert history.

    Args:
        settings: Alert levels and switches.
    """

    def __init__(self, settings: AlertSettings) -> None:
        self._settings = settings
        self._latches: dict[str, _PriceLatch] = {}
        self._history: deque[Alert] = deque(maxlen=settings.history_limit)

    @property
    def settings(self) -> AlertSettings:
        return self._settings

    def check_price(self, symbol: str, price: float | None) -> list[Alert]:
        """Fire price alerts for levels crossed since the last check."""
        if not self._settings.price_enabled or price is None:
            return []

        latch = self._latches.setdefault(symbol, _PriceLatch())
        fired: list[Alert] = []

        above = self._settings.price_above
        if above is not None and price > above:
            if not latch.above:
                fired.append(
                    Alert(
                        kind=AlertKind.PRICE_ABOVE,
                        symbol=symbol,
                        message=f"{symbol} price {price} is above {above}",
                        price=price,
                        level=above,
                    )
                )
                latch.above = True
        else:
            latch.above = False

        below = self._settings.price_below
        if below is not None and price < below:
            if not latch.below:
                fired.append(
                    Alert(
                        kind=AlertKind.PRICE_BELOW,
                        symbol=symbol,
                        message=f"{symbol} price {price} is below {below}",
                        price=price,
                        level=below,
                    )
                )
                latch.below = True
        else:
            latch.below = False

        self._record(fired)
        return fired

    def check_signals(self, symbol: str, signals: Iterable[Signal]) -> list[Alert]:
        """Fire one alert per signal with strength >= ``signal_min_strength``."""
        if not self._settings.signals_enabled:
            return []

        fired: list[Alert] = []
        for signal in signals:
            if signal.strength < self._settings.signal_min_strength:
                continue
            is_buy = signal.action is SignalAction.BUY
            fired.append(
                Alert(
                    kind=AlertKind.SIGNAL_BUY if is_buy else AlertKind.SIGNAL_SELL,
                    symbol=symbol,
                    message=(
                        f"{'Buy' if is_buy else 'Sell'} signal on {symbol}: "
                        f"{signal.description} (strength {signal.strength:.1f}%)"
                    ),
                    signal=signal,
                )
            )

        self._record(fired)
        return fired

    def get_history(self, limit: int = 0) -> list[Alert]:
        """Alerts oldest-first; ``limit > 0`` keeps only the newest ``limit``."""
        items = list(self._history)
        if limit > 0:
            return items[-limit:]
        return items

    def clear_history(self) -> None:
        self._history.clear()

    def _record(self, alerts: list[Alert]) -> None:
        for alert in alerts:
            self._history.append(alert)
            logger.info("alert_triggered", kind=alert.kind.value, symbol=alert.symbol)
