# libs/contracts/history.py
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from libs.contracts.errors import EmptyHistory, InsufficientData, MalformedRow
from libs.contracts.period import DAYS_PER_YEAR, Frequency, PeriodSpec
from libs.transforms.field_parser import NumberOrText

log = structlog.get_logger(__name__)

PRICE_COLUMNS = ["open", "high", "low", "close", "volume", "adj_close"]


class RowOrder(StrEnum):
    """Order in which a source delivers rows; Yahoo sends newest first."""

    NEWEST_FIRST = "newest_first"
    OLDEST_FIRST = "oldest_first"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class HistoryRow:
    """One raw, already-tokenized history row (values still number-or-text)."""

    date_text: Optional[NumberOrText]
    open: Optional[NumberOrText]
    high: Optional[NumberOrText]
    low: Optional[NumberOrText]
    close: Optional[NumberOrText]
    volume: Optional[NumberOrText]
    adj_close: Optional[NumberOrText]

    @classmethod
    def from_fields(cls, values: Sequence[NumberOrText]) -> "HistoryRow":
        """Positional: Date, Open, High, Low, Close, Volume, Adj Close. Short rows pad with None."""
        padded = list(values[:7]) + [None] * (7 - min(len(values), 7))
        return cls(*padded)

    @classmethod
    def coerce(cls, row: Union["HistoryRow", Mapping[str, Any], Sequence[Any]]) -> "HistoryRow":
        if isinstance(row, HistoryRow):
            return row
        if isinstance(row, Mapping):
            names = [f.name for f in fields(cls)]
            data = {n: row.get(n) for n in names}
            if data["date_text"] is None:
                data["date_text"] = row.get("date")
            return cls(**data)
        return cls.from_fields(list(row))

    def missing(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is None or getattr(self, f.name) == ""]


class Bar(BaseModel):
    # 行级契约（主键：date）
    model_config = ConfigDict(extra="forbid", frozen=True)
    date: dt.date
    open: float = Field(ge=0)
    high: float = Field(ge=0)
    low: float = Field(ge=0)
    close: float = Field(ge=0)
    volume: int = Field(ge=0)
    adj_close: float = Field(gt=0)      # log(price) needs a positive price


def parse_bar_date(value: Any) -> date:
    """'2020-01-08' / '1/8/2020' / 20200108 / date -> date. Raises ValueError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(str(value).strip())
    if pd.isna(ts):
        raise ValueError(f"unparsable date: {value!r}")
    return ts.date()


@dataclass(frozen=True, eq=False)
class HistorySeries:
    """
    Historical OHLCV + adjusted-close bars for one symbol.

    - frame: DataFrame indexed by a strictly ascending DatetimeIndex ("date")
      with columns open/high/low/close/volume/adj_close. Treat as read-only;
      use to_frame() for a private copy.
    - price is the adjusted close. Raw close is kept for reference and never
      enters a statistic.
    - log_return / volatility / mean_log_return are computed on every call.
    """

    frame: pd.DataFrame
    freq: Frequency = Frequency.WEEKLY
    period: PeriodSpec = field(default_factory=lambda: PeriodSpec.parse("3y"))

    # ---- 构造 ----
    @classmethod
    def ingest(
        cls,
        rows: Iterable[Union[HistoryRow, Mapping[str, Any], Sequence[Any]]],
        *,
        order: RowOrder = RowOrder.NEWEST_FIRST,
        freq: Union[str, Frequency] = Frequency.WEEKLY,
        period: Union[str, PeriodSpec] = "3y",
    ) -> "HistorySeries":
        """
        Validate raw rows and store them oldest-first.

        Raises EmptyHistory for zero rows, MalformedRow for a missing column,
        an unparsable date or value, a non-positive adjusted close, or a
        duplicate date.
        """
        freq = Frequency.parse(freq)
        period = PeriodSpec.parse(period)

        bars = [cls._to_bar(i, row) for i, row in enumerate(rows)]
        if not bars:
            raise EmptyHistory("history source returned no rows", value=str(period))

        if order is RowOrder.NEWEST_FIRST:
            bars.reverse()
        ordered = sorted(bars, key=lambda b: b.date)
        for i in range(1, len(ordered)):
            if ordered[i].date == ordered[i - 1].date:
                raise MalformedRow(f"duplicate date {ordered[i].date.isoformat()}", value=ordered[i].date.isoformat())
        if any(a is not b for a, b in zip(ordered, bars)):
            log.warning("history.reordered", rows=len(bars), nominal_order=str(order))
        bars = ordered

        df = pd.DataFrame([b.model_dump() for b in bars])
        df.index = pd.DatetimeIndex(pd.to_datetime(df.pop("date")), name="date")
        df = df[PRICE_COLUMNS].astype({"volume": "int64"})
        return cls(frame=df, freq=freq, period=period)

    @staticmethod
    def _to_bar(index: int, raw: Any) -> Bar:
        row = HistoryRow.coerce(raw)
        missing = row.missing()
        if missing:
            raise MalformedRow(f"row {index}: missing columns {missing}", value=row, index=index)
        try:
            d = parse_bar_date(row.date_text)
        except (ValueError, TypeError, OverflowError) as exc:
            raise MalformedRow(f"row {index}: bad date {row.date_text!r}", value=row, index=index) from exc
        try:
            return Bar(
                date=d,
                open=row.open,
                high=row.high,
                low=row.low,
                close=row.close,
                volume=row.volume,
                adj_close=row.adj_close,
            )
        except ValidationError as exc:
            bad = sorted({str(e["loc"][0]) for e in exc.errors() if e.get("loc")})
            raise MalformedRow(f"row {index}: invalid values in {bad}", value=row, index=index) from exc

    # ---- 元数据（不触发重算）----
    def with_frequency(self, freq: Union[str, Frequency]) -> "HistorySeries":
        return replace(self, freq=Frequency.parse(freq))

    def with_period(self, period: Union[str, PeriodSpec]) -> "HistorySeries":
        return replace(self, period=PeriodSpec.parse(period))

    # ---- 列视图 ----
    def __len__(self) -> int:
        return len(self.frame)

    @property
    def dates(self) -> List[date]:
        return [ts.date() for ts in self.frame.index]

    @property
    def price(self) -> pd.Series:
        return self.frame["adj_close"].rename("price").copy()

    def column(self, name: str) -> pd.Series:
        return self.frame[name].copy()

    def to_frame(self) -> pd.DataFrame:
        out = self.frame.copy()
        out["price"] = out["adj_close"]
        return out

    def to_records(self) -> List[dict]:
        out = self.frame.reset_index()
        out["date"] = [ts.date().isoformat() for ts in out["date"]]
        return out.to_dict(orient="records")

    # ---- 派生统计（每次重算，不缓存）----
    def log_return(self) -> pd.Series:
        """ln(price[i]) - ln(price[i-1]); the first element is 0. Not annualized."""
        lr = np.log(self.price).diff().rename("log_return")
        if len(lr):
            lr.iloc[0] = 0.0
        return lr

    def mean_gap_days(self) -> float:
        """Mean calendar-day gap between consecutive bars (needs >= 2 bars)."""
        if len(self.frame) < 2:
            raise InsufficientData(
                f"need at least 2 bars for annualized statistics, have {len(self.frame)}",
                value=len(self.frame),
            )
        idx = self.frame.index
        return float(np.mean((idx[1:] - idx[:-1]).days))

    def periods_per_year(self) -> float:
        return DAYS_PER_YEAR / self.mean_gap_days()

    def volatility(self) -> float:
        """Annualized: std(log_return) * sqrt(365.25 / mean gap)."""
        scale = self.periods_per_year()
        return float(self.log_return().std(ddof=1)) * math.sqrt(scale)

    def mean_log_return(self) -> float:
        """Annualized: mean(log_return) * (365.25 / mean gap)."""
        scale = self.periods_per_year()
        return float(self.log_return().mean()) * scale
