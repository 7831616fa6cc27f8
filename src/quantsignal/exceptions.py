"""Exceptions raised by the signal engine.

Formulas never raise: degenerate input produces a neutral result. The only
errors in this package come from malformed input records and from the
analysis engine reporting a failed asset.
"""


class QuantSignalError(Exception):
    """Base exception for all signal engine errors."""


class InvalidSeriesError(QuantSignalError):
    """Raised when OHLCV arrays handed to SeriesInput differ in length."""


class AnalysisError(QuantSignalError):
    """Raised when the analysis of a single asset fails.

    Args:
        symbol: Symbol of the asset whose analysis failed.
        cause: The underlying exception.
    """

    def __init__(self, symbol: str, cause: BaseException) -> None:
        super().__init__(f"Analysis failed for {symbol}: {cause}")
        self.symbol = symbol
        self.cause = cause
