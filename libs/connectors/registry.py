# libs/connectors/registry.py
from typing import Callable, Dict

from .base import HistorySourcePort, QuoteSourcePort
from .yahoo_csv import YahooCsvSource
from .yfinance_fetcher import YFinanceSource

# name -> factory; instances are built on demand so settings are read late
_REGISTRY: Dict[str, Callable[[], object]] = {
    "yfinance": YFinanceSource,
    "yahoo_csv": YahooCsvSource,
}


def get_quote_source(name: str) -> QuoteSourcePort:
    return _build(name)


def get_history_source(name: str) -> HistorySourcePort:
    return _build(name)


def list_sources() -> list[str]:
    return list(_REGISTRY.keys())


def _build(name: str):
    try:
        factory = _REGISTRY[name]
    except KeyError:
        raise ValueError(f"unknown data source: {name!r}; known: {list_sources()}") from None
    return factory()
