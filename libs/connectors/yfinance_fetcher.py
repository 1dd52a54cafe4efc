# connectors/yfinance_fetcher.py
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, List, Optional

import pandas as pd
import yfinance as yf

from libs.connectors.config import get_settings
from libs.contracts.errors import FetchFailure
from libs.contracts.period import Frequency
from libs.transforms.history_csv import HISTORY_HEADER

NA = "N/A"

_INTERVALS = {Frequency.DAILY: "1d", Frequency.WEEKLY: "1wk", Frequency.MONTHLY: "1mo"}


@dataclass(slots=True)
class YFinanceSource:
    """
    yfinance 实现的行情/历史数据源（满足 QuoteSourcePort / HistorySourcePort 契约）

    - fetch_quote(symbol) -> one CSV record in the 17-field quote layout,
      missing values rendered as "N/A" (like the old quotes.csv did)
    - fetch_history(symbol, start, freq) -> CSV text, header + rows newest first,
      columns Date,Open,High,Low,Close,Volume,Adj Close

    auto_adjust stays False so that both Close and Adj Close are delivered.
    """

    timeout_sec: float = 0.0
    source_name: str = "Yahoo Finance (yfinance)"

    def __post_init__(self) -> None:
        self.timeout_sec = self.timeout_sec or get_settings().TIMEOUT_SEC

    # ---- quote ----
    def fetch_quote(self, symbol: str) -> str:
        sym = symbol.upper().strip()
        try:
            info = yf.Ticker(sym).info or {}
        except Exception as exc:
            raise FetchFailure(f"yfinance quote request failed for {sym!r}: {exc}", value=sym, source=self.source_name) from exc

        price = _first(info, "currentPrice", "regularMarketPrice")
        name = _first(info, "longName", "shortName")
        if price is None and name is None:
            raise FetchFailure(f"No quote data returned for {sym!r} from yfinance", value=sym, source=self.source_name)

        last_date, last_time = _split_market_time(info.get("regularMarketTime"))
        values = [
            info.get("symbol") or sym,
            name,
            _first(info, "fullExchangeName", "exchange"),
            price,
            last_date,
            last_time,
            info.get("regularMarketChange"),
            _first(info, "regularMarketPreviousClose", "previousClose"),
            _first(info, "regularMarketOpen", "open"),
            _first(info, "regularMarketDayHigh", "dayHigh"),
            _first(info, "regularMarketDayLow", "dayLow"),
            _first(info, "regularMarketVolume", "volume"),
            info.get("trailingPE"),
            _first(info, "pegRatio", "trailingPegRatio"),
            info.get("dividendYield"),
            info.get("fiftyTwoWeekLow"),
            info.get("fiftyTwoWeekHigh"),
        ]
        return _render_record(values)

    # ---- history ----
    def fetch_history(self, symbol: str, start: date, freq: Frequency) -> str:
        sym = symbol.upper().strip()
        interval = _INTERVALS[Frequency.parse(freq)]
        try:
            df = yf.download(
                tickers=sym,
                start=start.isoformat(),
                interval=interval,
                auto_adjust=False,
                actions=False,
                threads=False,
                progress=False,
                timeout=self.timeout_sec,
            )
        except Exception as exc:
            raise FetchFailure(f"yfinance history request failed for {sym!r}: {exc}", value=sym, source=self.source_name) from exc

        if df is None or df.empty:
            # header only; HistorySeries.ingest decides this is EmptyHistory
            return ",".join(HISTORY_HEADER) + "\n"

        df = self._flatten_columns(df)
        df = self._rename_and_align_columns(df)
        df = df.dropna(subset=["Open", "High", "Low", "Close", "Adj Close"])
        df["Volume"] = pd.to_numeric(df["Volume"], errors="coerce").fillna(0).astype("int64")
        df = df.sort_values("Date", ascending=False)
        return df[HISTORY_HEADER].to_csv(index=False, lineterminator="\n")

    # ---- 辅助函数 ----
    @staticmethod
    def _flatten_columns(df: pd.DataFrame) -> pd.DataFrame:
        """拍平 MultiIndex 列；yfinance 常见列形如 ('Open','AAPL')，保留字段层 level=0。"""
        if isinstance(df.columns, pd.MultiIndex):
            df = df.copy()
            df.columns = df.columns.get_level_values(0)
        return df

    @staticmethod
    def _rename_and_align_columns(df: pd.DataFrame) -> pd.DataFrame:
        """Index -> 'Date' column (ISO date text); guarantee every header column exists."""
        out = df.copy()
        idx = pd.to_datetime(out.index, errors="coerce")
        out = out.loc[~idx.isna()]
        out.insert(0, "Date", [ts.date().isoformat() for ts in idx[~idx.isna()]])
        rename_map = {"AdjClose": "Adj Close", "adj close": "Adj Close", "adj_close": "Adj Close"}
        out = out.rename(columns={c: rename_map.get(c, c) for c in out.columns})
        if "Adj Close" not in out.columns and "Close" in out.columns:
            out["Adj Close"] = out["Close"]
        if "Volume" not in out.columns:
            out["Volume"] = 0
        for c in HISTORY_HEADER:
            if c not in out.columns:
                out[c] = pd.NA
        return out.reset_index(drop=True)


def _first(info: dict, *keys: str) -> Any:
    for k in keys:
        v = info.get(k)
        if v is not None and v != "":
            return v
    return None


def _split_market_time(epoch: Optional[int]) -> tuple:
    """Epoch seconds -> ('11/19/2010', '4:00pm') as the old d1/t1 tags looked."""
    if not epoch:
        return None, None
    try:
        ts = datetime.fromtimestamp(int(epoch), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None, None
    hour = ts.hour % 12 or 12
    return f"{ts.month}/{ts.day}/{ts.year}", f"{hour}:{ts.minute:02d}{'am' if ts.hour < 12 else 'pm'}"


def _render_record(values: List[Any]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="")
    w.writerow([NA if v is None else v for v in values])
    return buf.getvalue()
