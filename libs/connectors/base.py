from __future__ import annotations
from typing import Protocol, runtime_checkable
from datetime import date

from libs.contracts.period import Frequency


@runtime_checkable
class QuoteSourcePort(Protocol):
    """
    Contract for quote sources.

    - `source_name`: short identifier for logging / the snapshot's `source` label
    - `fetch_quote(symbol)`: returns ONE delimited text record with at least 17
      fields in this order:
        symbol, name, exchange, last price, last date, last time, change,
        prev close, open, high, low, volume, P/E, PEG, dividend yield,
        52wk low, 52wk high
      Network errors / non-success responses must raise FetchFailure, never
      return an empty string as if it were data.
    """

    source_name: str

    def fetch_quote(self, symbol: str) -> str:
        ...


@runtime_checkable
class HistorySourcePort(Protocol):
    """
    Contract for history sources.

    - `fetch_history(symbol, start, freq)`: returns CSV text, a header line then
      one row per bar, newest first:
        Date,Open,High,Low,Close,Volume,Adj Close
      A header with no rows is a valid answer (the symbol has no bars in the
      window); failures raise FetchFailure.
    """

    source_name: str

    def fetch_history(self, symbol: str, start: date, freq: Frequency) -> str:
        ...
