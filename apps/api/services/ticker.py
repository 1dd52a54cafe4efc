# apps/api/services/ticker.py
from __future__ import annotations

from datetime import date
from time import perf_counter
from typing import Callable, Optional, Union

import structlog

from libs.connectors.base import HistorySourcePort, QuoteSourcePort
from libs.connectors.config import get_settings
from libs.connectors.registry import get_history_source, get_quote_source
from libs.contracts.errors import TickerError
from libs.contracts.history import HistorySeries, RowOrder
from libs.contracts.period import Frequency, PeriodSpec
from libs.contracts.quote import QuoteSnapshot
from libs.transforms.field_parser import parse_record
from libs.transforms.history_csv import rows_from_csv

DEFAULT_PERIOD = "3y"
DEFAULT_FREQ = "w"


class Ticker:
    """
    编排对象：一个 symbol 的当前报价 + 历史序列
      - 依赖注入（quote_source / history_source / logger / clock / today）
      - refresh_quote:   fetch -> parse_record -> QuoteSnapshot
      - refresh_history: PeriodSpec -> start date -> fetch -> rows_from_csv -> HistorySeries

    Refreshes are atomic: the new snapshot / series is built first and only
    then assigned, so a failed refresh leaves the previous state untouched.
    Not thread-safe; callers serialize access to one instance.
    """

    def __init__(
        self,
        symbol: str,
        *,
        quote_source: QuoteSourcePort,
        history_source: HistorySourcePort,
        period: Union[str, PeriodSpec, None] = None,
        freq: Union[str, Frequency, None] = None,
        logger=None,
        clock: Callable[[], float] = perf_counter,
        today: Callable[[], date] = date.today,
    ):
        sym = str(symbol or "").strip().upper()
        if not sym:
            raise ValueError("symbol must be non-empty")
        self.symbol = sym
        self.quote_source = quote_source
        self.history_source = history_source
        self.log = logger or structlog.get_logger()
        self.clock = clock
        self.today = today

        self.period: PeriodSpec = PeriodSpec.parse(_or_default(period, DEFAULT_PERIOD))
        self.freq: Frequency = Frequency.parse(_or_default(freq, DEFAULT_FREQ))
        self.quote: Optional[QuoteSnapshot] = None
        self.history: Optional[HistorySeries] = None

    # ---- 构造入口：报价 + 历史都成功才返回 ----
    @classmethod
    def create(
        cls,
        symbol: str,
        period: Union[str, PeriodSpec, None] = DEFAULT_PERIOD,
        freq: Union[str, Frequency, None] = DEFAULT_FREQ,
        *,
        quote_source: Optional[QuoteSourcePort] = None,
        history_source: Optional[HistorySourcePort] = None,
        logger=None,
        clock: Callable[[], float] = perf_counter,
        today: Callable[[], date] = date.today,
    ) -> "Ticker":
        """
        Validate period / freq (empty means default '3y' / 'w'), then refresh
        quote and history once. Any failure propagates; no half-built Ticker
        is returned. Sources default to MARKET_QUOTE_SOURCE / MARKET_HISTORY_SOURCE.
        """
        cfg = get_settings()
        t = cls(
            symbol,
            quote_source=quote_source or get_quote_source(cfg.QUOTE_SOURCE),
            history_source=history_source or get_history_source(cfg.HISTORY_SOURCE),
            period=period,
            freq=freq,
            logger=logger,
            clock=clock,
            today=today,
        )
        t.refresh_quote()
        t.refresh_history()
        return t

    # Perf: one blocking network call
    def refresh_quote(self) -> QuoteSnapshot:
        t0 = self.clock()
        source = getattr(self.quote_source, "source_name", "unknown")
        try:
            raw = self.quote_source.fetch_quote(self.symbol)
            snapshot = QuoteSnapshot.ingest(parse_record(raw), source=source)
        except TickerError as exc:
            self._log_failure("quote", exc, source=source)
            raise

        self.quote = snapshot
        self.log.info(
            "quote.refreshed",
            symbol=self.symbol,
            source=source,
            last_price=snapshot.last_price,
            duration_ms=int((self.clock() - t0) * 1000),
        )
        return snapshot

    # Perf: one blocking network call + O(n) validation / sort
    def refresh_history(
        self,
        period: Union[str, PeriodSpec, None] = None,
        freq: Union[str, Frequency, None] = None,
        *,
        reference_date: Optional[date] = None,
    ) -> HistorySeries:
        """
        Omitted / empty period or freq reuse the current values. The start date
        is reference_date (default: today) minus the period's lookback.
        """
        new_period = PeriodSpec.parse(_or_default(period, self.period))
        new_freq = Frequency.parse(_or_default(freq, self.freq))
        start = new_period.start_date(reference_date or self.today())

        t0 = self.clock()
        source = getattr(self.history_source, "source_name", "unknown")
        try:
            text = self.history_source.fetch_history(self.symbol, start, new_freq)
            series = HistorySeries.ingest(
                rows_from_csv(text),
                order=RowOrder.NEWEST_FIRST,
                freq=new_freq,
                period=new_period,
            )
        except TickerError as exc:
            self._log_failure("history", exc, source=source, period=str(new_period), freq=new_freq.value)
            raise

        # 全部成功后一次性替换
        self.history, self.period, self.freq = series, new_period, new_freq
        self.log.info(
            "history.refreshed",
            symbol=self.symbol,
            source=source,
            period=str(new_period),
            freq=new_freq.value,
            start=start.isoformat(),
            rows=len(series),
            duration_ms=int((self.clock() - t0) * 1000),
        )
        return series

    # ---- 派生统计（委托给 HistorySeries）----
    def log_return(self):
        return self._require_history().log_return()

    def volatility(self) -> float:
        return self._require_history().volatility()

    def mean_log_return(self) -> float:
        return self._require_history().mean_log_return()

    def _require_history(self) -> HistorySeries:
        if self.history is None:
            raise RuntimeError(f"history for {self.symbol} has not been fetched; call refresh_history()")
        return self.history

    def _log_failure(self, what: str, exc: TickerError, **extra) -> None:
        self.log.warning(
            f"{what}.failed",
            symbol=self.symbol,
            error_code=exc.error_code,
            error=exc.message,
            value=str(exc.value)[:200] if exc.value is not None else None,
            **extra,
        )

    def __repr__(self) -> str:
        return f"Ticker({self.symbol!r}, period={str(self.period)!r}, freq={self.freq.value!r})"


def _or_default(value, default):
    """None / '' / whitespace -> default; anything else passes through."""
    if value is None:
        return default
    if isinstance(value, str) and not value.strip():
        return default
    return value
