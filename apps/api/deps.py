# apps/api/deps.py
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache

from libs.connectors.base import HistorySourcePort, QuoteSourcePort
from libs.connectors.config import get_settings
from libs.connectors.registry import get_history_source, get_quote_source


@dataclass(frozen=True)
class MarketSources:
    quote: QuoteSourcePort
    history: HistorySourcePort


@lru_cache
def get_market_sources() -> MarketSources:
    """
    Wire up data sources (DI):
      - quote:   MARKET_QUOTE_SOURCE   (default yfinance)
      - history: MARKET_HISTORY_SOURCE (default yfinance)
    Tests override this with app.dependency_overrides.
    """
    cfg = get_settings()
    return MarketSources(
        quote=get_quote_source(cfg.QUOTE_SOURCE),
        history=get_history_source(cfg.HISTORY_SOURCE),
    )
