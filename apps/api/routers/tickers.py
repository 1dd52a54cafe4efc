# apps/api/routers/tickers.py
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from apps.api.deps import MarketSources, get_market_sources
from apps.api.services.ticker import Ticker
from libs.transforms.report import render_report

router = APIRouter(prefix="/tickers", tags=["tickers"])

PERIOD_Q = Query(None, description="Lookback, e.g. 3y / 6m / 26w / 90d (default 3y)")
FREQ_Q = Query(None, description="d / w / m (default w)")


def _ticker(symbol: str, period: Optional[str], freq: Optional[str], src: MarketSources) -> Ticker:
    return Ticker.create(
        symbol,
        period,
        freq,
        quote_source=src.quote,
        history_source=src.history,
        logger=structlog.get_logger(),
    )


@router.get("/{symbol}/quote")
def get_quote(symbol: str, src: MarketSources = Depends(get_market_sources)):
    """Current quote only (no history fetch)."""
    t = Ticker(symbol, quote_source=src.quote, history_source=src.history, logger=structlog.get_logger())
    return t.refresh_quote().model_dump()


@router.get("/{symbol}/history")
def get_history(
    symbol: str,
    period: Optional[str] = PERIOD_Q,
    freq: Optional[str] = FREQ_Q,
    src: MarketSources = Depends(get_market_sources),
):
    """Bars oldest first, adjusted close as `adj_close`."""
    t = Ticker(symbol, quote_source=src.quote, history_source=src.history, period=period, freq=freq,
               logger=structlog.get_logger())
    h = t.refresh_history()
    return {
        "symbol": t.symbol,
        "period": str(h.period),
        "freq": h.freq.value,
        "bars": h.to_records(),
    }


@router.get("/{symbol}/stats")
def get_stats(
    symbol: str,
    period: Optional[str] = PERIOD_Q,
    freq: Optional[str] = FREQ_Q,
    src: MarketSources = Depends(get_market_sources),
):
    """Annualized volatility / mean log return; InsufficientData -> 422."""
    t = Ticker(symbol, quote_source=src.quote, history_source=src.history, period=period, freq=freq,
               logger=structlog.get_logger())
    h = t.refresh_history()
    dates = h.dates
    return {
        "symbol": t.symbol,
        "period": str(h.period),
        "freq": h.freq.value,
        "bars": len(h),
        "first_date": dates[0].isoformat(),
        "last_date": dates[-1].isoformat(),
        "volatility": h.volatility(),
        "mean_log_return": h.mean_log_return(),
    }


@router.get("/{symbol}/report", response_class=PlainTextResponse)
def get_report(
    symbol: str,
    period: Optional[str] = PERIOD_Q,
    freq: Optional[str] = FREQ_Q,
    src: MarketSources = Depends(get_market_sources),
):
    t = _ticker(symbol, period, freq, src)
    return render_report(t.quote, t.history)
