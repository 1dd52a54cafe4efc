# libs/contracts/errors.py
from __future__ import annotations

from typing import Any


class TickerError(Exception):
    """
    Base error for quote / history retrieval.

    - error_code: short machine-readable kind, e.g. "INVALID_FORMAT"
    - value: the offending input (symbol, period text, raw record ...)
    """

    error_code: str = "TICKER_ERROR"

    def __init__(self, message: str, *, value: Any = None):
        super().__init__(message)
        self.message = message
        self.value = value

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "detail": self.message, "value": _jsonable(self.value)}


class InvalidFormat(TickerError, ValueError):
    """Period / frequency text does not follow the grammar."""

    error_code = "INVALID_FORMAT"


class MalformedQuote(TickerError, ValueError):
    """Quote record is structurally incomplete."""

    error_code = "MALFORMED_QUOTE"


class MalformedRow(TickerError, ValueError):
    """A history row is missing a column or has an unparsable value."""

    error_code = "MALFORMED_ROW"

    def __init__(self, message: str, *, value: Any = None, index: int | None = None):
        super().__init__(message, value=value)
        self.index = index


class EmptyHistory(TickerError, ValueError):
    error_code = "EMPTY_HISTORY"


class InsufficientData(TickerError, ValueError):
    """Annualized statistics need at least two bars."""

    error_code = "INSUFFICIENT_DATA"


class FetchFailure(TickerError, RuntimeError):
    """Data source unreachable or returned an error status."""

    error_code = "FETCH_FAILURE"

    def __init__(self, message: str, *, value: Any = None, source: str | None = None):
        super().__init__(message, value=value)
        self.source = source


def _jsonable(v: Any) -> Any:
    if v is None or isinstance(v, (str, int, float, bool)):
        return v
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _jsonable(x) for k, x in v.items()}
    return str(v)
