"""Custom exceptions for the technical analysis scanner.

Insufficient indicator history is NOT an exception: indicators return
None and downstream code treats the factor as abstaining.
"""


class ScannerError(Exception):
    """Base exception for all scanner errors."""


class ProviderError(ScannerError):
    """Raised when the market data provider fails to return tickers, markets or candles."""

    def __init__(self, operation: str, symbol: str | None = None, reason: str = "") -> None:
        self.operation = operation
        self.symbol = symbol
        self.reason = reason
        target = f" for {symbol}" if symbol else ""
        super().__init__(f"{operation} failed{target}: {reason}")


class UnknownExchangeError(ScannerError):
    """Raised when the configured exchange id is not supported by ccxt."""


class ScanInProgressError(ScannerError):
    """Raised when a scan is requested while another scan is still running."""


class ReasoningServiceError(ScannerError):
    """Raised when the external reasoning service cannot be reached or is misconfigured."""


class ReasoningResponseError(ScannerError):
    """Raised when the reasoning service response cannot be parsed into a recommendation."""
